# TuyaRelay Example
# -*- coding: utf-8 -*-
"""
 TuyaRelay - Relay a bulb's power state to a TCP peer without HomeKit

 The bulb is watched through a DeviceLink and every on/off report is sent to
 the relay peer. Start a peer in another terminal with:

    python -m tuyarelay listen

"""
import asyncio
import tuyarelay

# tuyarelay.set_debug(True)

async def main():
    config = tuyarelay.load_config('tuyarelay.json')

    link = tuyarelay.DeviceLink(config.device, keepalive=config.keepalive)
    relay = tuyarelay.RelayClient(config.relay)
    adapter = tuyarelay.BridgeAdapter(tuyarelay.StateMirror(), relay, link)

    link.start()
    try:
        while True:
            await asyncio.sleep(30)
            print('Power is %s (link %s, %d relayed, %d failed)' %
                  ('on' if adapter.on_get() else 'off', link.state, relay.sent, relay.failed))
    finally:
        await link.stop()
        await relay.drain()

if __name__ == "__main__":
    asyncio.run(main())
