from rasterkit.cli import main

main()
