#!filepath: feecast/cli.py
import asyncio
from typing import Optional

import typer
from rich import print

from feecast import init_logging, logs
from feecast.config.app_config import AppConfig

app = typer.Typer(help="feecast base-fee forecasting CLI")


def _load(config: Optional[str]):
    from feecast.workflows.fee_training import build_fee_runtime

    cfg = AppConfig.load(config)
    init_logging(cfg.log)
    return build_fee_runtime(cfg)


@app.command()
def version():
    print("v0.1.0")


@app.command()
def train(
    config: Optional[str] = typer.Option(None, help="YAML config path"),
    window: Optional[int] = typer.Option(None, help="Blocks in the training window"),
):
    """
    运行一次训练（fetch → dataset → fit），打印结果摘要
    """
    rt = _load(config)
    summary = asyncio.run(rt.trainer.bootstrap(block_window=window))

    color = "green" if summary.published else "yellow"
    print(f"[{color}]{summary.to_dict()}[/{color}]")


@app.command()
def recommend(
    config: Optional[str] = typer.Option(None, help="YAML config path"),
    priority: Optional[float] = typer.Option(None, help="Priority fee (gwei)"),
):
    """
    训练后给出一次 fee 建议
    """
    rt = _load(config)
    summary = asyncio.run(rt.trainer.bootstrap())
    print(f"[blue]train: {summary.to_dict()}[/blue]")

    rec = asyncio.run(rt.service.recommend(priority))
    print(rec.to_dict())


@app.command()
def window(
    config: Optional[str] = typer.Option(None, help="YAML config path"),
    count: Optional[int] = typer.Option(None, help="Blocks to fetch"),
    rows: int = typer.Option(20, help="Rows to print"),
):
    """
    Fetch the recent block window and show the derived samples
    """
    from feecast.chain.range_fetch_engine import RangeFetchEngine
    from feecast.training.engines.dataset_build_engine import DatasetBuildEngine, samples_frame

    rt = _load(config)
    engine = RangeFetchEngine.from_config(rt.source, rt.cfg.fetch, inst=rt.inst)
    blocks = asyncio.run(
        engine.fetch_recent(count or rt.cfg.fetch.block_window, rt.cfg.fetch.block_step)
    )
    frame = samples_frame(DatasetBuildEngine().build(blocks))

    print(f"[blue]blocks={len(blocks)} samples={len(frame)}[/blue]")
    print(frame.tail(rows))


@app.command()
def serve(config: Optional[str] = typer.Option(None, help="YAML config path")):
    """
    Bootstrap training, then start the HTTP API
    """
    from feecast.api.app import create_app
    from feecast.workflows.fee_training import PeriodicTrainer

    rt = _load(config)

    try:
        summary = asyncio.run(rt.trainer.bootstrap())
        logs.info(f"Bootstrapped model with samples={summary.samples}, mse={summary.mse}")
    except Exception:
        logs.exception("Bootstrap failed")

    refresher = PeriodicTrainer(rt.trainer, rt.cfg.model.retrain_interval_sec)
    refresher.start()

    api = create_app(rt.service, rt.trainer, rt.inst.metrics)
    logs.info(f"Server on :{rt.cfg.api.port}")
    try:
        api.run(host=rt.cfg.api.host, port=rt.cfg.api.port)
    finally:
        refresher.stop(timeout=1.0)


if __name__ == "__main__":
    app()

# python -m feecast.cli serve
