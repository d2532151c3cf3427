from mergebuild.cli.main import main

main()
