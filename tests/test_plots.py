import matplotlib.pyplot as plt

from allocation_engine.plots import plot_allocations


def test_plot_allocations_marks_cap():
    fig = plot_allocations(["A", "B"], [0.6, 0.4], max_weight=0.5, title="kelly")
    ax = fig.axes[0]
    assert len(ax.patches) == 2
    assert ax.get_title() == "kelly"
    assert ax.get_legend() is not None
    plt.close(fig)
