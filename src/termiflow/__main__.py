from termiflow.cli import main

main()
