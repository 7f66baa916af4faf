from ctftime_mcp.server import main

main()
