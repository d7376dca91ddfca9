from glassops.cli import main

raise SystemExit(main())
