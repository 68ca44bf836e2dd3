"""Run a synthetic workload against a metric registry and log its rates."""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass

import hydra
from omegaconf import DictConfig

from meterkit import MeterView, MetricRegistry, RegistryConfig

logger = logging.getLogger(__name__)


@dataclass
class WorkloadConfig:
    producers: int = 4
    events_per_second: float = 200.0
    duration_s: float = 15.0


def _produce(meter: MeterView, backlog: "queue.Queue[int]", cfg: WorkloadConfig, stop: threading.Event) -> None:
    delay = 1.0 / cfg.events_per_second
    while not stop.is_set():
        meter.record_event()
        try:
            backlog.put_nowait(1)
        except queue.Full:
            pass
        time.sleep(delay)


def _consume(backlog: "queue.Queue[int]", processed: MeterView, stop: threading.Event) -> None:
    while not stop.is_set():
        try:
            backlog.get(timeout=0.1)
        except queue.Empty:
            continue
        processed.record_event()
        time.sleep(0.004)


def run_workload(registry: MetricRegistry, cfg: WorkloadConfig) -> dict[str, float]:
    produced = registry.meter("events.produced")
    processed = registry.meter("events.processed")
    backlog: "queue.Queue[int]" = queue.Queue(maxsize=10_000)
    registry.gauge("backlog.size", backlog.qsize)
    registry.gauge_meter("backlog.growth", backlog.qsize)

    stop = threading.Event()
    threads = [
        threading.Thread(target=_produce, args=(produced, backlog, cfg, stop), daemon=True)
        for _ in range(cfg.producers)
    ]
    threads.append(threading.Thread(target=_consume, args=(backlog, processed, stop), daemon=True))
    with registry:
        for thread in threads:
            thread.start()
        time.sleep(cfg.duration_s)
        stop.set()
        for thread in threads:
            thread.join(timeout=1.0)
        final = registry.report()
    logger.info(
        "Produced %d events, processed %d events",
        produced.current_count(),
        processed.current_count(),
    )
    return dict(final.metrics)


@hydra.main(config_path="../configs", config_name="monitor", version_base=None)
def main(cfg: DictConfig) -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    registry = MetricRegistry(RegistryConfig.from_config(cfg.get("registry")))
    workload = WorkloadConfig(**cfg.get("workload", {}))
    run_workload(registry, workload)


if __name__ == "__main__":
    main()
