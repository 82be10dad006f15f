from kvshell.cli.main import main

raise SystemExit(main())
