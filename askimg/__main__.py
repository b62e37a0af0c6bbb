from askimg.cli import main

raise SystemExit(main())
