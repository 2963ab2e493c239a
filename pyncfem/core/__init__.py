from .topology import Node, Cell, FACE_VERTICES
from .mesh import QuadMesh
from .convention import GEOM, GeometryConvention
__all__=['Node','Cell','FACE_VERTICES','QuadMesh','GEOM','GeometryConvention']
