from witchfile.cli import main

raise SystemExit(main())
