"""pyncfem.io.visualization"""
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import PolyCollection
from typing import Optional, Sequence

from pyncfem.core.topology import as_vertex_array
from pyncfem.fem.shape_coefficients import edge_midpoints, evaluate_affine, midpoint_centroid
from pyncfem.fem.transform import map_points

# bl, br, tr, tl: the drawing order of a cell outline
_OUTLINE = [0, 1, 3, 2]


def plot_mesh(mesh, *, plot_nodes=True, cell_ids=False, show=True, ax=None):
    """
    Plots the cells of a :class:`~pyncfem.core.mesh.QuadMesh`.

    Returns:
        matplotlib.axes.Axes: The axes object containing the plot.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))
    verts = mesh.cell_vertices()[:, _OUTLINE, :]
    ax.add_collection(PolyCollection(verts, facecolors='none', edgecolors='black', linewidths=0.8))
    if plot_nodes:
        ax.plot(mesh.nodes_x_y_pos[:, 0], mesh.nodes_x_y_pos[:, 1], 'k.', markersize=3)
    if cell_ids:
        for cid, cv in enumerate(mesh.cell_vertices()):
            cx, cy = cv.mean(axis=0)
            ax.text(cx, cy, str(cid), ha='center', va='center', fontsize=8, color='blue')
    ax.autoscale_view()
    ax.set_aspect('equal', adjustable='box')
    if show:
        plt.show()
    return ax


def plot_shape_functions(element, cell, *, resolution: int = 40,
                         dofs: Optional[Sequence[int]] = None,
                         levels: int = 15, show: bool = True, axes=None):
    """
    Contour plot of the element's basis functions over one cell.

    The cell is sampled on a ``resolution``-by-``resolution`` reference grid
    mapped through the bilinear geometry; edge midpoints and their centroid
    are marked.

    Returns:
        numpy.ndarray: The array of axes, one per plotted DOF.
    """
    V = as_vertex_array(cell)
    dofs = list(range(element.dofs_per_cell)) if dofs is None else list(dofs)
    if axes is None:
        fig, axes = plt.subplots(1, len(dofs), figsize=(4 * len(dofs), 4), squeeze=False)
        axes = axes[0]
    axes = np.atleast_1d(axes)

    s = np.linspace(-1.0, 1.0, resolution)
    XI, ETA = np.meshgrid(s, s)
    ref = np.column_stack([XI.ravel(), ETA.ravel()])
    phys = map_points(V, ref)
    X = phys[:, 0].reshape(XI.shape)
    Y = phys[:, 1].reshape(XI.shape)
    vals = evaluate_affine(element.shape_coefficients(V), phys)

    mids = edge_midpoints(V)
    cent = midpoint_centroid(V)
    outline = V[_OUTLINE + [0]]
    for ax, k in zip(axes, dofs):
        cs = ax.contourf(X, Y, vals[k].reshape(XI.shape), levels=levels, cmap='viridis')
        plt.colorbar(cs, ax=ax, shrink=0.8)
        ax.plot(outline[:, 0], outline[:, 1], 'k-', lw=1.0)
        ax.plot(mids[:, 0], mids[:, 1], 'wo', ms=4)
        ax.plot(cent[0], cent[1], 'r+', ms=8)
        ax.set_title(f"{element.name()}  N{k}")
        ax.set_aspect('equal', adjustable='box')
    if show:
        plt.show()
    return axes
