"""
StarLight Simulation Module

Drives a `StarLightSystem` with synthetic stimulus streams and plots how the
field statistics, the synthesized concept and the control parameters drift
over time.

Stimulus modes: "query" (fixed text bump), "pulse" (bump on one tick),
"noise" (Gaussian per index), "constant" (same vector every tick).
"""

import numpy as np
import matplotlib.pyplot as plt

from starlight import StarLightSystem, encode

CONCEPT_LEVEL = {"no_action": 0, "drive_syntropy": 1, "dampen_variance": 2}


def generate_stimulus(mode="query", steps=50, dimensions=50, seed=None, **kwargs):
    rng = np.random.default_rng(seed)

    text = kwargs.get("text", "latency")
    pulse_at = kwargs.get("pulse_at", steps // 2)
    noise = kwargs.get("noise", 0.05)
    const_value = kwargs.get("value", 0.0)

    bump = encode(text, dimensions)
    for t in range(steps):
        if mode == "query":
            u = bump
        elif mode == "pulse":
            u = bump if t == pulse_at else np.zeros(dimensions)
        elif mode == "noise":
            u = rng.normal(0.0, noise, size=dimensions)
        elif mode == "constant":
            u = np.full(dimensions, const_value, dtype=float)
        else:
            raise ValueError(f"Unsupported mode: {mode}")
        yield u


def run_simulation(
    steps=50,
    stimulus_type="query",
    dimensions=50,
    seed=None,
    **kwargs
):
    system = StarLightSystem(dimensions=dimensions, rng_seed=seed, max_history=steps)
    for u in generate_stimulus(mode=stimulus_type, steps=steps, dimensions=dimensions, seed=seed, **kwargs):
        system.run_cycle(u)
    return list(system.history)


def plot_trace(trace):
    t = [s["t"] for s in trace]
    variance = [s["variance"] for s in trace]
    stability = [s["stability"] for s in trace]
    magnitude = [s["magnitude"] for s in trace]
    level = [CONCEPT_LEVEL.get(s["concept"], -1) for s in trace]

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    ax1.plot(t, variance, label="Variance", linewidth=2)
    ax1.plot(t, stability, label="Stability", linestyle="--")
    ax1.plot(t, magnitude, label="Concept magnitude", linestyle="-.")

    reduced_t = [s["t"] for s in trace if s["chaos_reduced"]]
    reduced_v = [s["variance"] for s in trace if s["chaos_reduced"]]
    ax1.scatter(reduced_t, reduced_v, color="red", label="Chaos reduction")
    ax1.set_ylabel("Values")
    ax1.legend()
    ax1.grid(True)

    ax2.plot(t, [s["alpha"] for s in trace], label="α")
    ax2.plot(t, [s["beta"] for s in trace], label="β")
    ax2.plot(t, [s["control_gain"] for s in trace], label="K")
    ax2.set_xlabel("Cycle")
    ax2.set_ylabel("Parameters")
    ax2.legend(loc="upper left")
    ax2.grid(True)

    ax3 = ax2.twinx()
    ax3.step(t, level, where="post", color="black", alpha=0.4)
    ax3.set_yticks(list(CONCEPT_LEVEL.values()))
    ax3.set_yticklabels(list(CONCEPT_LEVEL.keys()))

    fig.suptitle("Field Statistics, Concepts and Parameter Drift")
    fig.tight_layout()
    plt.show()


if __name__ == "__main__":
    plot_trace(run_simulation(steps=200, stimulus_type="query", seed=7))
