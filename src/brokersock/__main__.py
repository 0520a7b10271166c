from brokersock.cli import main

main()
