from recent_upload.cli import main

main()
