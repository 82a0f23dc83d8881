from releaser.cli import main

raise SystemExit(main())
