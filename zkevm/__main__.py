from zkevm.main import main

main()
