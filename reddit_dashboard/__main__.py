from reddit_dashboard.main import main

main()
