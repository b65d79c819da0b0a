from __future__ import annotations

from collections.abc import Sequence

import matplotlib.gridspec as gridspec
import matplotlib.pyplot as plt
import numpy as np

from .ants import Ant
from .colony import IterationRecord, RunResult
from .geometry import GraphNode, NodeSet, node_positions

# --- Visualization Parameters ---
NODE_SIZE = 80
EDGE_ALPHA = 0.25
VISITED_EDGE_ALPHA = 0.9


def _segment(ax, pos: np.ndarray, i: int, j: int, **kwargs) -> None:
    ax.plot([pos[i, 0], pos[j, 0]], [pos[i, 1], pos[j, 1]], **kwargs)


def draw_graph(ax, positions: np.ndarray, best_order: Sequence[int] | None = None,
               ants: Sequence[Ant] | None = None, title: str | None = None) -> None:
    '''Complete graph in grey, each ant's path in its own colour, best tour dashed black.'''
    pos = np.asarray(positions, dtype=float).reshape(-1, 2)
    n = len(pos)
    ax.clear()
    if title:
        ax.set_title(title, fontsize=12)
    ax.set_xticks([]); ax.set_yticks([]); ax.set_aspect('equal', 'box')

    for i in range(n):
        for j in range(i + 1, n):
            _segment(ax, pos, i, j, color='gray', alpha=EDGE_ALPHA, zorder=1)

    if ants:
        cmap = plt.get_cmap('turbo', len(ants))
        for k, ant in enumerate(ants):
            path = [c - 1 for c in ant.path]
            for a, b in zip(path, path[1:]):
                _segment(ax, pos, a, b, color=cmap(k), alpha=VISITED_EDGE_ALPHA, linewidth=2, zorder=2)

    if best_order and len(best_order) > 1:
        order = [c - 1 for c in best_order]
        for k in range(len(order)):
            _segment(ax, pos, order[k], order[(k + 1) % len(order)],
                     color='black', linewidth=3, linestyle='--', zorder=3)

    if n:
        ax.scatter(pos[:, 0], pos[:, 1], s=NODE_SIZE, c='white', edgecolors='black', zorder=4)


def draw_convergence(ax, history: Sequence[IterationRecord]) -> None:
    '''Best-so-far and iteration-best tour length per iteration.'''
    ax.clear()
    ax.set_title('Global Best Solution Convergence')
    ax.set_xlabel('Iteration'); ax.set_ylabel('Tour Length')
    ax.grid(True, linestyle='--', alpha=0.6)
    if not history:
        ax.text(0.5, 0.5, "No data available", ha='center', va='center', transform=ax.transAxes)
        return
    iters = [r.iteration for r in history]
    ax.plot(iters, [r.best_length for r in history], color='black', label='Best so far')
    ax.plot(iters, [r.iteration_best_length for r in history], color='tab:orange', alpha=0.7,
            label='Iteration best')
    ax.legend(loc='upper right')


def show_result(nodes: Sequence[GraphNode] | NodeSet | np.ndarray, result: RunResult,
                path: str | None = None, *, show_ants: bool = False):
    '''Tour and convergence side by side. Saved to `path` if given, shown otherwise.'''
    pos = nodes if isinstance(nodes, np.ndarray) else node_positions(list(nodes))
    fig = plt.figure(figsize=(14, 6))
    gs = gridspec.GridSpec(1, 2, width_ratios=[1, 1], wspace=0.25)
    ax_graph, ax_conv = fig.add_subplot(gs[0, 0]), fig.add_subplot(gs[0, 1])

    title = (f"Best tour: {result.best.length:.4f}" if result.best.found else "No tour")
    draw_graph(ax_graph, pos, result.best.order, result.ants if show_ants else None, title=title)
    draw_convergence(ax_conv, result.history)

    if path:
        fig.savefig(path, bbox_inches='tight')
        plt.close(fig)
    else:
        plt.show()
    return fig
