from vpsctl.cli import main

main()
