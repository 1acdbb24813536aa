# polycloud

`polycloud` holds two small tools: an X25519 key agreement demonstration and
a line-based TCP chat server built on `asyncio`.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install .[test]
pytest
```

## Key agreement

```
polycloud-dh
```

Generates an ephemeral X25519 key pair for Alice and one for Bob, lets each
side compute the shared secret from its own secret and the other's public
key, and prints whether the two secrets match, followed by the secret's raw
bytes decoded as UTF-8 with undecodable bytes replaced.

The functions in `polycloud.key_exchange` can be used directly:

```python
from polycloud import key_exchange

alice_secret, alice_public = key_exchange.generate_key_pair()
bob_secret, bob_public = key_exchange.generate_key_pair()

assert key_exchange.shared_secret(alice_secret, bob_public) == \
    key_exchange.shared_secret(bob_secret, alice_public)
```

This is for learning, not for production use.

## Chat server

```
polycloud-server
polycloud-server 0.0.0.0:7000
```

The server listens on `127.0.0.1:6142` unless a `host:port` address is given
as the only argument. A malformed address is rejected with a usage error; if
the address cannot be bound, the error is printed and the command exits with
status 1.

Protocol, one UTF-8 line per message, each ending in a newline:

1. On connecting, a client receives `Please enter your username:`.
2. The first line the client sends is its username. Every other connected
   user then receives `<name> has joined the chat`.
3. Each further line the client sends goes to every other user as
   `<name>: <message>`.
4. When the client disconnects, the others receive `<name> has left the chat`.

Connections and relayed messages are logged at INFO level.

From code, `polycloud.server.serve(addr)` runs the server inside an existing
event loop, and `polycloud.server.Shared` keeps each connected peer's outgoing
message queue, with `add_peer`, `remove_peer` and `broadcast`.

## What it does not do

- There is no chat client in this package. Any program that sends and
  receives newline-terminated lines over TCP, such as `nc 127.0.0.1 6142`,
  can talk to the server.
- Messages travel in plain text; the server uses no encryption, and the key
  agreement demonstration is not wired into the chat.
- Beyond the key agreement, no other cryptographic primitives (symmetric
  encryption, public-key encryption, signatures) are provided.