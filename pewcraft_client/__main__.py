from pewcraft_client.main import main

raise SystemExit(main())
