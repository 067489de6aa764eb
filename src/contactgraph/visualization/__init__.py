"""
Visualization module (requires matplotlib).

Import ``contactgraph.visualization.plots`` to build the analysis figures.
"""
