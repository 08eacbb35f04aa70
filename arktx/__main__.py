from arktx import broker
from arktx.builder import TransactionRequest
from arktx.config import get_settings
from arktx.engine import Engine, BatchResult
from arktx.errors import ArktxError
from arktx.ledger import HttpLedger
from arktx.transaction import TransactionType

import asyncio
import json
import logging


logger = logging.getLogger(__name__)

PROMPT = 'Ѧ '

EVENTS = (
    broker.TransactionBuilt,
    broker.TransactionFailed,
    broker.MultiSignatureDerived,
    broker.BatchSubmitted,
    broker.SubmissionFailed,
)


def usage() -> str:
    lines = ['Enter <type> [quantity] [entity fields], Ctrl-D to quit:']
    lines += [f'  {t.value:>2} {t.name}' for t in TransactionType]
    lines.append('  11 1 <type> <subType> register|update|resign [name|id] [ipfs]')
    return '\n'.join(lines)


async def printer(q: asyncio.Queue, verbose: bool):
    while True:
        event = await q.get()
        match event:
            case broker.TransactionBuilt() as e:
                if verbose:
                    print(json.dumps(e.payload, indent=2))
            case broker.TransactionFailed() as e:
                print(f'#{e.index} (nonce {e.nonce}) failed: {e.error.message}')
            case broker.MultiSignatureDerived() as e:
                print(f'Multisignature address: {e.address}')
            case broker.BatchSubmitted() as e:
                print(
                    f'Submitted {e.count}: {len(e.result.accepted)} accepted, '
                    f'{len(e.result.invalid)} invalid'
                )
                if e.result.errors:
                    print(json.dumps(e.result.errors, indent=2))
            case broker.SubmissionFailed() as e:
                print(f'Submission failed: {e.error.message}')
                if e.error.body:
                    print(e.error.body)
        q.task_done()
        if event is None:
            break


async def handle(engine: Engine, line: str) -> BatchResult | None:
    """Run one prompt line. Errors are reported and the prompt carries on."""
    try:
        return await engine.run(TransactionRequest.parse(line))
    except ArktxError as e:
        print(e.message)
    except Exception as e:
        logger.exception('Batch %r aborted', line)
        print(f'Batch aborted: {e}')
    return None


async def main():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    b = broker.Broker()
    q = asyncio.Queue()
    for event in EVENTS:
        b.sub(event, q)
    task = asyncio.create_task(printer(q, settings.verbose))
    loop = asyncio.get_running_loop()
    async with HttpLedger(settings) as ledger:
        engine = Engine(settings, ledger, b)
        print(usage())
        while True:
            try:
                line = await loop.run_in_executor(None, input, PROMPT)
            except (EOFError, KeyboardInterrupt):
                break
            if not line.strip():
                continue
            await handle(engine, line)
            await q.join()
    q.put_nowait(None)
    await task


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
