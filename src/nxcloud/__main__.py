from nxcloud._cli import main

raise SystemExit(main())
