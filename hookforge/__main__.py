from hookforge.cli import main

main()
