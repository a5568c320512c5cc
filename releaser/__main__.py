from releaser.cli.app import main

main()
