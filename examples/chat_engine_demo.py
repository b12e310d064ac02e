# ======================================================================
# StarLight Chat Engine Demo — queries → concepts → parameter drift
# ======================================================================
"""
StarLight Chat Engine Demo
==========================

This example shows how to:

• Turn chat queries into field stimuli (5 cycles per query)
• Read back the synthesized concept and pattern descriptors
• Track how α, β and the controller gain drift under feedback

Outputs:
  • CSV of the per-cycle history
  • Plot of the final primary / pattern / deduction fields

Run from CLI:
    python examples/chat_engine_demo.py --seed 7 --out ./starlight_demo
"""

from __future__ import annotations
import argparse
from pathlib import Path

import pandas as pd
import matplotlib.pyplot as plt

from starlight import StarLightSystem

QUERIES = [
    "What's the health of the platform?",
    "Why is accountservice latency so high?",
    "Show my checking balance",
    "Is ledger-db reconfiguring?",
    "Summarize the risk for transactionservice",
]


def main(seed: int = 7, dimensions: int = 50, out: str = "./starlight_demo") -> pd.DataFrame:
    out_dir = Path(out)
    out_dir.mkdir(parents=True, exist_ok=True)

    system = StarLightSystem(dimensions=dimensions, rng_seed=seed)
    for q in QUERIES:
        info = system.run_query(q)
        concept, patterns = info["selected_concept"], info["patterns"]
        print(f"> {q}")
        print(f"  directive={concept.id} intensity={concept.magnitude:.4f} "
              f"stability={patterns.stability:.3f} flux={patterns.variance:.4f}")
        print(f"  {system.explain_last()}")

    df = pd.DataFrame(system.history)
    df.to_csv(out_dir / "history.csv", index=False)
    print(df.groupby("concept").size())

    core = system.get_core_state()
    cog = system.get_cognitive_state()
    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(core["primary_field"], label="primary")
    ax.plot(system.core_dynamics.pattern_field, label="pattern (EMA)")
    ax.plot(cog["deduction_field"] * dimensions, label="deduction × N")
    ax.set_xlabel("Index")
    ax.set_title(f"Fields after {len(df)} cycles (t={core['time']:.1f})")
    ax.legend()
    fig.tight_layout()
    fig.savefig(out_dir / "fields.png", dpi=120)
    return df


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--seed", type=int, default=7)
    ap.add_argument("--dimensions", type=int, default=50)
    ap.add_argument("--out", type=str, default="./starlight_demo")
    args = ap.parse_args()
    main(seed=args.seed, dimensions=args.dimensions, out=args.out)
