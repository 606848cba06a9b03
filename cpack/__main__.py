from cpack.cli import main

main()
