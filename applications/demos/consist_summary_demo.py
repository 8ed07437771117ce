# %%
# Script for summarizing the bundled example consists: a manifest freight with a
# mid-train distributed power unit, a push-pull commuter set with a cab-car, and
# a steam-hauled train whose tender record is missing from the trainset.

import logging
import time

import railconsist as rc

rc.set_log_level(logging.INFO)
logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")

# %%
t0 = time.perf_counter()
resolver = rc.CachedResolver(rc.TrainsetResolver(rc.defaults.DEMO_ROUTE_ROOT))
definitions = rc.load_definitions(rc.defaults.DEMO_CONSISTS_DIR)
consists = rc.build_consists(definitions, resolver)
t1 = time.perf_counter()

print(f"Time to build {len(consists)} consists: {t1-t0:.3g}")

# %%
summary = rc.summarize_consists(consists)
print(summary)

# %%
for consist in consists:
    print(f"\n{consist.name} ({consist.num_engines} engines, {consist.num_cars} cars)")
    print(consist.to_dataframe())
    print("mass behind each coupler [t]:", (consist.coupler_trailing_mass_kilograms() / 1e3).round(1))
    for nf in consist.unresolved:
        print(f"unresolved: {nf.reference} ({nf.reason})")
