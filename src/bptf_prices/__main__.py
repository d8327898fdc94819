from bptf_prices.cli import main

main()
