"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from botctl.core.config import load_settings
from botctl.core.errors import BotctlError
from botctl.core.model import ActionResult, StatusRecord
from botctl.core.service import BotService

app = typer.Typer(help="Discover, query, and actuate Bot BLE push-button devices")


def _build_service(ctx: typer.Context) -> BotService:
    config_path = ctx.obj.get("config_path") if ctx.obj else None
    return BotService(settings=load_settings(config_path))


def _fail(exc: BotctlError) -> typer.Exit:
    typer.echo(f"Error ({exc.step}): {exc}", err=True)
    return typer.Exit(code=1)


def _interrupted() -> typer.Exit:
    typer.echo("Interrupted", err=True)
    return typer.Exit(code=130)


def _echo_status(record: StatusRecord) -> None:
    typer.echo(f"Battery: {record.battery_percent}%")
    typer.echo(f"Firmware: {record.firmware_version:.1f}")
    typer.echo(f"Strength: {record.push_strength}")
    typer.echo(f"ADC: {record.adc_value}")
    typer.echo(f"Motor Calibration: {record.motor_calibration}")
    typer.echo(f"Timer: {record.timer_count}")
    typer.echo(f"Act Mode: {record.act_mode}")
    typer.echo(f"Hold-and-press Times: {record.hold_press_count}")


def _echo_action(verb: str, result: ActionResult) -> None:
    typer.echo(f"Sent {verb} to {result.address} payload={result.payload_hex}")


def _target_address(service: BotService, address: str | None, device: str | None) -> str:
    if address:
        return address
    return service.resolve_target(device).address


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config: Path | None = typer.Option(None, "--config", help="Path to a botctl config.yaml"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    ctx.obj = {"config_path": config}


@app.command("scan")
def scan(
    ctx: typer.Context,
    duration: float | None = typer.Option(None, "--duration", help="Scan time in seconds"),
) -> None:
    """Scan for advertising Bots. Repeated broadcasts are listed each time."""
    try:
        service = _build_service(ctx)
        handles = service.scan(duration)
        if not handles:
            typer.echo("No Bot found")
            return

        for index, handle in enumerate(handles, start=1):
            suffix = " - (encrypted)" if handle.is_encrypted else ""
            typer.echo(
                f"{index} Bot ({handle.address}) mode={int(handle.mode)} state={int(handle.state)}{suffix}"
            )
    except BotctlError as exc:
        raise _fail(exc) from None
    except KeyboardInterrupt:
        raise _interrupted() from None


@app.command("status")
def status(
    ctx: typer.Context,
    address: str | None = typer.Argument(None, help="Device address; omit to query every Bot found"),
    device: str | None = typer.Option(None, "--device", help="Full or partial address to select"),
    timeout: float | None = typer.Option(None, "--timeout", help="Response timeout in seconds"),
) -> None:
    """Print battery, firmware, and counters reported by a Bot."""
    try:
        service = _build_service(ctx).with_overrides(response_timeout_s=timeout)
        if address or device:
            target = _target_address(service, address, device)
            typer.echo(f"Bot {target}")
            _echo_status(service.status(target))
            return

        results = service.status_all()
        if not results:
            typer.echo("No Bot found")
            return

        failed = False
        for index, (handle, outcome) in enumerate(results, start=1):
            typer.echo(f"Bot {index} ({handle.address})")
            if isinstance(outcome, BotctlError):
                failed = True
                typer.echo(f"Failed to get info ({outcome.step}): {outcome}", err=True)
                continue
            _echo_status(outcome)
        if failed:
            raise typer.Exit(code=1)
    except BotctlError as exc:
        raise _fail(exc) from None
    except KeyboardInterrupt:
        raise _interrupted() from None


@app.command("press")
def press(
    ctx: typer.Context,
    address: str | None = typer.Argument(None),
    device: str | None = typer.Option(None, "--device", help="Full or partial address to select"),
) -> None:
    """Press the button once."""
    try:
        service = _build_service(ctx)
        result = service.press(_target_address(service, address, device))
        _echo_action("press", result)
    except BotctlError as exc:
        raise _fail(exc) from None
    except KeyboardInterrupt:
        raise _interrupted() from None


@app.command("on")
def turn_on(
    ctx: typer.Context,
    address: str | None = typer.Argument(None),
    device: str | None = typer.Option(None, "--device", help="Full or partial address to select"),
) -> None:
    """Switch a Bot in switch mode on."""
    try:
        service = _build_service(ctx)
        result = service.turn_on(_target_address(service, address, device))
        _echo_action("on", result)
    except BotctlError as exc:
        raise _fail(exc) from None
    except KeyboardInterrupt:
        raise _interrupted() from None


@app.command("off")
def turn_off(
    ctx: typer.Context,
    address: str | None = typer.Argument(None),
    device: str | None = typer.Option(None, "--device", help="Full or partial address to select"),
) -> None:
    """Switch a Bot in switch mode off."""
    try:
        service = _build_service(ctx)
        result = service.turn_off(_target_address(service, address, device))
        _echo_action("off", result)
    except BotctlError as exc:
        raise _fail(exc) from None
    except KeyboardInterrupt:
        raise _interrupted() from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
