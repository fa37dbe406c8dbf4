from covgate.cli import main

main()
