import logging
import random
import sys

from soar_collector import AccessorSource, CollectorConfig, DataCollector

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


class ToyAgent:
    """Stand-in for a runtime agent exposing its statistics as attributes."""

    def __init__(self, name: str):
        self.name = name
        self.learning_enabled = True
        self.reinit()

    def reinit(self):
        self.decision_cycles = 0
        self.kernel_seconds = 0.0
        self.cpu_seconds = 0.0
        self.production_firings = 0
        self.wm_current = 20
        self.wm_max = 20
        self.wm_count = 0
        self.wm_additions = 0
        self.wm_removals = 0

    def step(self):
        self.decision_cycles += 1
        elapsed = random.uniform(0.0001, 0.0005)
        self.kernel_seconds += elapsed
        self.cpu_seconds += elapsed * 1.1
        self.production_firings += random.randint(1, 5)
        added, removed = random.randint(0, 4), random.randint(0, 4)
        self.wm_additions += added
        self.wm_removals += removed
        self.wm_current = max(1, self.wm_current + added - removed)
        self.wm_max = max(self.wm_max, self.wm_current)
        self.wm_count += self.wm_current


agent = ToyAgent("toy")
source = AccessorSource(agent)

# Writing output straight to the screen
collector = DataCollector(CollectorConfig.by_cycles(10))
collector.set_output_stream(sys.stdout)


def run(cycles: int):
    collector.on_start()
    for _ in range(cycles):
        agent.step()
        # once per cycle for all agents; collect for each agent when due
        if collector.on_update_event():
            collector.collect(source)
    collector.on_stop()
    # collecting while stopped flushes
    collector.collect(source)


print("Output (100 cycles every 10):")
run(100)

# Reset restarts the clock and deltas but keeps the current file and header.
# Bind a new stream to start a new file with its own header.
collector.reset()
agent.reinit()
print()

collector.set_period_millis(5)
collector.set_additional_settings("toy agent, random workload")
print("Output (2000 cycles every 5 msec):")
run(2000)
