from searchbridge.main import main

main()
