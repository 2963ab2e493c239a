import matplotlib.pyplot as plt
import numpy as np
from pyncfem.fem.p1nc import P1NCElement
from pyncfem.io.visualization import plot_mesh, plot_shape_functions
from pyncfem.utils.meshgen import structured_quad_mesh

def test_plot_mesh_returns_axes():
    mesh = structured_quad_mesh(1.0, 1.0, nx=3, ny=2, distortion=0.05, seed=0)
    ax = plot_mesh(mesh, cell_ids=True, show=False)
    assert len(ax.collections) == 1
    assert len(ax.texts) == 6
    plt.close('all')

def test_plot_shape_functions():
    V = np.array([[0.0, 0.0], [2.0, 0.2], [0.3, 1.5], [1.8, 1.9]])
    axes = plot_shape_functions(P1NCElement(), V, resolution=10, show=False)
    assert len(axes) == 4
    assert axes[2].get_title().endswith("N2")
    axes = plot_shape_functions(P1NCElement(), V, resolution=10, dofs=[1], show=False)
    assert len(axes) == 1
    plt.close('all')
