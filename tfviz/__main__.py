from tfviz.cli import main

main()
