import asyncio

from fx_converter import FxConverter
from fx_converter.ui.terminal import TerminalRenderer

print(FxConverter.__version__)  # 0.1.0

# Default usage: public exchange rate API, pt-BR formatting
fx = FxConverter()

# Convert 100 USD into EUR; the USD table is fetched once and reused
result = fx.convert(100, "USD", "EUR")
print(fx.format(result.converted_amount))  # e.g. 92,00
print(fx.describe(result, "USD", "EUR"))  # e.g. 1 USD = 0,9200 EUR
print(fx.last_update())  # e.g. Atualizado 3h atrás

# Same base currency, different target: no new request
print(fx.format(fx.convert("2500", "USD", "BRL").converted_amount))

# Drive the widget controller from a terminal for a few seconds
controller = fx.controller(renderer=TerminalRenderer())


async def demo() -> None:
    await controller.start()
    await controller.set_amount("250")
    await controller.settle()
    await controller.swap()
    await controller.settle()
    await controller.stop()


asyncio.run(demo())
