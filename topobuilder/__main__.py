from topobuilder.cli import main

main()
