from ghapp_creds.main import main

main()
