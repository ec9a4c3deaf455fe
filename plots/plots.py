import numpy as np
import matplotlib.pyplot as plt
from models.polyline import PolyLine
from curves.bezier import Bezier


def plot_polyline(line: PolyLine, curve=None, offset_line: PolyLine = None,
                  title: str = "Flattened Curve", show: bool = True):
    """
    Plot a flattened curve in the xy-plane.

    Args:
        line: Flattened curve
        curve: Optional source curve; a Bezier also gets its control polygon
        offset_line: Optional flattened offset line
        title: Plot title
        show: Call plt.show()

    Returns:
        fig, ax
    """
    fig, ax = plt.subplots(figsize=(10, 8))

    if curve is not None:
        f = np.linspace(0.0, 1.0, 500)
        dense = np.array([curve.get_point(fi).to_array() for fi in f])
        ax.plot(dense[:, 0], dense[:, 1], color='0.7', lw=3, label='Curve')
        if isinstance(curve, Bezier):
            cp = np.array([p.to_array() for p in curve.control_points])
            ax.plot(cp[:, 0], cp[:, 1], 'c--o', lw=1, markersize=4, label='Control polygon')

    ax.plot(line.x, line.y, 'k.-', lw=1, markersize=5, label=f'Polyline ({line.size} points)')
    if offset_line is not None:
        ax.plot(offset_line.x, offset_line.y, 'b.-', lw=1, markersize=4,
                label=f'Offset ({offset_line.size} points)')

    ax.plot(line.x[0], line.y[0], 'go', markersize=10, label='Start', zorder=10)
    ax.plot(line.x[-1], line.y[-1], 'rs', markersize=10, label='End', zorder=10)

    ax.set_aspect('equal')
    ax.set_xlabel('x [m]')
    ax.set_ylabel('y [m]')
    ax.set_title(title)
    ax.legend(loc='best')
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    if show:
        plt.show()
    return fig, ax


def plot_curvature(curve, n_points: int = 200, title: str = "Curvature", show: bool = True):
    """Plot curvature and heading against distance along the curve."""
    f = np.linspace(0.0, 1.0, n_points)
    s = f * curve.length
    kappa = np.array([curve.get_curvature(fi) for fi in f])
    heading = np.unwrap(np.array([float(curve.get_direction(fi)) for fi in f])) \
        if curve.dimension == 2 else None

    fig, axes = plt.subplots(2, 1, figsize=(12, 6), sharex=True)

    axes[0].plot(s, kappa, 'b-')
    axes[0].set_ylabel('Curvature [1/m]')
    axes[0].grid(True)

    if heading is not None:
        axes[1].plot(s, np.degrees(heading), 'm-')
    axes[1].set_xlabel('Distance [m]')
    axes[1].set_ylabel('Heading [deg]')
    axes[1].grid(True)

    axes[0].set_title(title)
    plt.tight_layout()
    if show:
        plt.show()
    return fig, axes
