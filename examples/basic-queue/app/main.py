import asyncio
import random

from pico_ioc import EventBus

from pico_workqueue import QueueEvent, QueueScheduler, init
from pico_workqueue.logging import configure_logging


async def resize(image: str) -> str:
    await asyncio.sleep(random.uniform(0.01, 0.1))
    return f"{image} -> thumbnail"


async def main():
    configure_logging("DEBUG")
    container = init(modules=[])

    bus = container.get(EventBus)
    bus.subscribe(QueueEvent, lambda event: print(f"[{event.queue_name}] {event.kind.value}"))

    scheduler = container.get(QueueScheduler)
    queue = scheduler.create_async_queue(resize, name="thumbnails", concurrency=3)

    images = [f"photo-{i}.jpg" for i in range(10)]
    for result in await asyncio.gather(*(queue.push(image) for image in images)):
        print(result)

    await queue.drained()
    await container.ashutdown()


if __name__ == "__main__":
    asyncio.run(main())
