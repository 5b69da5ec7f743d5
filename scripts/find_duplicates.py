"""Find duplicate research units and facility names that collide after normalization."""

import pandas as pd

from plantmerge.normalize import normalize

# Read data
units = pd.read_csv("localdata/research_units.csv")
plants = pd.read_csv("localdata/plants.csv")

# --- Duplicate (plant_slug, unit_name) rows in the research export ---
keys = units[["plant_slug", "unit_name"]].astype(str)
dupes = units[keys.duplicated(keep=False)].sort_values(["plant_slug", "unit_name"])

print("=== Duplicate research units (plant_slug, unit_name) ===")
if dupes.empty:
    print("  No duplicates found.")
else:
    counts = keys.value_counts()
    for (slug, unit), count in counts[counts > 1].sort_index().items():
        print(f"  {slug} / {unit} (x{count})")
    print(f"\n  Total: {len(dupes)} rows")

print()

# --- Distinct facility names sharing a normalized form within a state ---
for label, df, name_col in (
    ("research", units, "plant_name"),
    ("authoritative", plants, "plant_name_eia"),
):
    names = df[[name_col, "state"]].dropna().drop_duplicates()
    names["normalized"] = names[name_col].map(normalize)
    grouped = names.groupby(["normalized", "state"])[name_col].apply(sorted)

    print(f"=== Normalized name collisions ({label}) ===")
    collisions = grouped[grouped.map(len) > 1]
    if collisions.empty:
        print("  No collisions found.")
    else:
        for (norm, state), originals in collisions.items():
            print(f"  {norm!r} ({state})")
            for orig in originals:
                print(f"    - {orig}")
    print()
