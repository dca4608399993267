from lidlstock.cli import main

raise SystemExit(main())
