import argparse
import io
import os
import time

from soar_collector import CollectorConfig, CounterSnapshot, DataCollector


def main() -> None:
    parser = argparse.ArgumentParser(description="Per-cycle cost of the data collector")
    parser.add_argument("--cycles", type=int, default=200_000)
    parser.add_argument("--period", type=int, default=10)
    parser.add_argument("--output", default="")
    parser.add_argument("--compression", default="none", choices=["lz4", "zstd", "none"])
    args = parser.parse_args()

    config = CollectorConfig.by_cycles(args.period).with_compression(args.compression)
    collector = DataCollector(config)
    if args.output:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        collector.open_output(args.output)
    else:
        collector.set_output_stream(io.StringIO())

    collector.on_start()
    samples = 0
    start = time.perf_counter()
    for dc in range(1, args.cycles + 1):
        if collector.on_update_event():
            snapshot = CounterSnapshot(
                agent_name="bench",
                decision_cycles=dc,
                kernel_seconds=dc * 2e-4,
                cpu_seconds=dc * 2.2e-4,
                production_firings=dc * 3,
                wm_current=100,
                wm_max=150,
                wm_count=dc * 100,
                wm_additions=dc * 2,
                wm_removals=dc * 2,
            )
            collector.collect(snapshot)
            samples += 1
    collector.on_stop()
    elapsed = time.perf_counter() - start
    collector.close()

    print("Collector Overhead Results")
    print(f"- Cycles: {args.cycles} (sample every {args.period})")
    print(f"- Samples: {samples}")
    print(f"- Compression: {args.compression}")
    print(f"- Elapsed: {elapsed:.4f} s")
    print(f"- Per cycle: {elapsed / args.cycles * 1e6:.3f} us")
    if samples:
        print(f"- Per sample: {elapsed / samples * 1e6:.3f} us")


if __name__ == "__main__":
    main()
