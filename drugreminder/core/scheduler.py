"""
Planificador de tareas periódicas (equivalente al planificador en segundo plano del host)

Registra en app.state tareas asyncio que ejecutan un handler cada N minutos.
El handler devuelve RunResult.SUCCESS o RunResult.RETRY; ante RETRY se espera
un backoff creciente (acotado por el intervalo) antes del siguiente intento.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from fastapi import FastAPI

MIN_INTERVAL_MINUTES = 15

_TASKS_STATE_KEY = "_drugreminder_periodic_tasks"


class RunResult(str, enum.Enum):
    """Resultado de una ejecución para el planificador"""
    SUCCESS = "success"
    RETRY = "retry"


Handler = Callable[[], Awaitable[RunResult]]
Sleep = Callable[[float], Awaitable[None]]


async def run_periodically(
    *,
    name: str,
    interval_minutes: int,
    handler: Handler,
    logger: logging.Logger,
    retry_backoff_seconds: float = 60.0,
    run_timeout_seconds: Optional[float] = None,
    wait_first: bool = False,
    sleep: Sleep = asyncio.sleep,
) -> None:
    """
    Bucle de ejecución periódica. Termina solo por cancelación.

    - SUCCESS: siguiente ejecución tras interval_minutes.
    - RETRY, timeout o excepción inesperada: backoff (se duplica en cada
      reintento seguido, máximo el intervalo).
    """
    if interval_minutes < MIN_INTERVAL_MINUTES:
        raise ValueError(f"El intervalo debe ser de al menos {MIN_INTERVAL_MINUTES} minutos")

    interval_seconds = float(interval_minutes) * 60.0
    backoff = min(float(retry_backoff_seconds), interval_seconds)

    if wait_first:
        await sleep(interval_seconds)

    while True:
        try:
            if run_timeout_seconds:
                result = await asyncio.wait_for(handler(), timeout=run_timeout_seconds)
            else:
                result = await handler()
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            logger.error(f"⏱️ Tarea periódica {name} superó el tiempo máximo ({run_timeout_seconds}s)")
            result = RunResult.RETRY
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"❌ Error en la tarea periódica {name}: {exc}")
            result = RunResult.RETRY

        if result == RunResult.RETRY:
            logger.warning(f"🔁 Tarea periódica {name}: reintento en {backoff}s")
            await sleep(backoff)
            backoff = min(backoff * 2, interval_seconds)
        else:
            backoff = min(float(retry_backoff_seconds), interval_seconds)
            await sleep(interval_seconds)


def start_periodic_task(
    app: "FastAPI",
    *,
    name: str,
    interval_minutes: int,
    handler: Handler,
    logger: logging.Logger,
    retry_backoff_seconds: float = 60.0,
    run_timeout_seconds: Optional[float] = None,
    wait_first: bool = False,
) -> asyncio.Task[None]:
    """
    Iniciar la tarea periódica y registrarla en app.state.
    """
    if interval_minutes < MIN_INTERVAL_MINUTES:
        raise ValueError(f"El intervalo debe ser de al menos {MIN_INTERVAL_MINUTES} minutos")

    tasks: Optional[List[asyncio.Task[None]]] = getattr(app.state, _TASKS_STATE_KEY, None)
    if tasks is None:
        tasks = []
        setattr(app.state, _TASKS_STATE_KEY, tasks)

    task = asyncio.create_task(
        run_periodically(
            name=name,
            interval_minutes=interval_minutes,
            handler=handler,
            logger=logger,
            retry_backoff_seconds=retry_backoff_seconds,
            run_timeout_seconds=run_timeout_seconds,
            wait_first=wait_first,
        ),
        name=str(name),
    )
    tasks.append(task)
    return task


async def stop_periodic_tasks(app: "FastAPI", *, logger: logging.Logger) -> None:
    """
    Detener las tareas periódicas registradas en app.state.
    """
    tasks: Optional[List[asyncio.Task[None]]] = getattr(app.state, _TASKS_STATE_KEY, None)
    if not tasks:
        return

    for t in list(tasks):
        t.cancel()

    # CancelledError es el final esperado
    try:
        await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        setattr(app.state, _TASKS_STATE_KEY, [])
        logger.info("🛑 Tareas periódicas detenidas")
