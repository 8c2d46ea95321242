# KDSpace - Balanced k-d tree with box queries

__version__ = "1.0.0"

# Import main components for direct API access
from kdspace.core.tree import KDTree, KDNode
from kdspace.core.points import Tree2D, Tree3D, TreeND, make_tree
from kdspace.builder.builder import build_kdtree
from kdspace.io.reader import read_points, load_tree
from kdspace.io.writer import write_points, write_tree
