from mcp.server.fastmcp import FastMCP

# All tools we want to expose via the MCP server
from statkit.infrastructure.resources import get_all_resources_tools
from statkit.tools.core import get_all_dataset_tools, get_all_table_tools
from statkit.tools.core.statistics import get_all_statistical_test_tools
from statkit.tools.plotting import get_all_plotting_tools

# create an MCP server
mcp = FastMCP("statkit")

# Add resource and project manifest tools
for tool_func in get_all_resources_tools():
    mcp.add_tool(tool_func)

# Add dataset management tools
for tool_func in get_all_dataset_tools():
    mcp.add_tool(tool_func)

# Add frequency and cross table tools
for tool_func in get_all_table_tools():
    mcp.add_tool(tool_func)

# Add statistical test, effect size and post-hoc tools
for tool_func in get_all_statistical_test_tools():
    mcp.add_tool(tool_func)

# Add plotting tools
for tool_func in get_all_plotting_tools():
    mcp.add_tool(tool_func)


def main():
    mcp.run()


if __name__ == "__main__":
    main()
