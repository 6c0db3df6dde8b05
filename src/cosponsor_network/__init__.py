"""Co-sponsorship collaboration networks - build, extract and lay out ego graphs."""

__version__ = "0.1.0"

from cosponsor_network.direction import filter_by_direction as filter_by_direction
from cosponsor_network.ego import extract_ego as extract_ego
from cosponsor_network.graph import build_support_graph as build_support_graph
from cosponsor_network.layout import layout as layout
from cosponsor_network.service import EgoNetworkService as EgoNetworkService
