# hntwallet

Building blocks for a Helium wallet: keypairs and addresses, password
hashing, plain and Shamir-sharded key derivation, transaction encoding,
fee calculation, signing, chain-variable transactions and a client for
the onboarding staking server.

Every failure the package detects is raised as
`hntwallet.codec.WalletError`.

## Installation

```
pip install hntwallet
```

To run the test suite:

```
pip install "hntwallet[test]"
pytest
```

## Modules

- `hntwallet.codec`: `WalletError`; base64 helpers `to_b64`,
  `from_b64`, `to_b64_url` and `from_b64_url` (URL-safe, no padding);
  `u64_to_b64` and `u64_from_b64` for 64-bit integers stored as eight
  little-endian bytes; `to_b58check` and `from_b58check` (double-SHA256
  checksum, version byte 0 required when decoding).
- `hntwallet.memo`: `Memo`, an unsigned 64-bit payment memo. `str(memo)`
  gives its base64 form, `Memo.parse(text)` reads it back and `int(memo)`
  gives the value.
- `hntwallet.pwhash`: `Pbkdf2` (PBKDF2-HMAC-SHA256, 8-byte salt) and
  `Argon2id13` (16-byte salt, ops and memory limits). Each has
  `hash(password, length)`, `read(stream)` and `write(stream)`. The
  helpers `pbkdf2(iterations)`, `pbkdf2_default()` (1,000,000 iterations)
  and `argon2id13_default()` (sensitive limits) create hashers with a
  fresh random salt.
- `hntwallet.shamir`: `create_keyshares(key, count, threshold)` splits a
  32-byte key into 33-byte shares; `combine_keyshares(shares)` recovers it.
- `hntwallet.format`: key derivation formats. `Basic` uses the stretched
  password as the key. `Sharded` combines the stretched password (by
  HMAC-SHA256) with a random key split into `KeyShare`s; the first call to
  `derive_key` creates the shares, later calls need at least
  `recovery_threshold` of them. `shards()` splits a `Sharded` into one
  per share, `absorb()` merges congruent shards, and `write()`/`read()`
  store one shard as count, threshold and the 33-byte share. Built with
  `basic(pwhash)`, `sharded(count, threshold, pwhash)` and
  `sharded_default(pwhash)` (five shares, threshold three).
- `hntwallet.keypair`: `KeyType` (`ECC_COMPACT`, `ED25519`, `MULTISIG`),
  `Network` (`MAINNET`, `TESTNET`), `PublicKey` and `Keypair`. Ed25519 and
  compact P-256 keys are supported. `str(public_key)` is the base58check
  address and `PublicKey.from_b58` parses one; `Keypair.generate`,
  `Keypair.from_entropy`, `sign`, `PublicKey.verify`, and binary
  `read`/`write` on both classes.
- `hntwallet.protobuf`: the protocol buffer wire format used by the
  transactions: `encode_varint`, `decode_varint`, `encode_field` and
  `iter_fields`.
- `hntwallet.transactions`: dataclass messages such as
  `BlockchainTxnPaymentV1`, `BlockchainTxnPaymentV2`,
  `BlockchainTxnAddGatewayV1`, `BlockchainTxnOuiV1`,
  `BlockchainTxnVarsV1` and `BlockchainTxnRoutingV1`, each with
  `encode()` and `decode()`; the `BlockchainTxn` envelope with `encode`,
  `decode`, `to_b64` and `from_b64`; and `in_envelope(txn)` and
  `from_envelope(envelope, txn_type)`.
- `hntwallet.fees`: `TxnFeeConfig` (`legacy()`, `from_dict()`,
  `dc_payload_size()`), `StakingMode`, `calculate_txn_fee`, `txn_fee`,
  `txn_staking_fee` and `txn_mode_staking_fee`.
- `hntwallet.signing`: `sign_txn(txn, keypair)` and
  `verify_txn(txn, public_key, signature)` sign the transaction with its
  signature fields cleared; `txn_payer(envelope)` returns the paying key
  or `None`.
- `hntwallet.chain_vars`: `parse_var_set("name=value")` types a variable
  from its JSON value (int, float, string, otherwise atom);
  `build_vars_txn(sets, unsets, cancels, keys, nonce, current_vars)`
  builds a `BlockchainTxnVarsV1`, using one past the chain's current
  `nonce` when none is given.
- `hntwallet.txn_json`: `vars_txn_to_json`, `var_to_json`, `maybe_b58`
  and `maybe_b64_url` render chain-variable transactions as JSON-ready
  dictionaries.
- `hntwallet.staking`: `StakingClient(base_url, timeout)` with
  `address_for(gateway)` and `sign(onboarding_key, txn)`; it can be used
  as a context manager.

## Examples

A signed payment:

```python
from hntwallet.fees import TxnFeeConfig, txn_fee
from hntwallet.keypair import Keypair, KeyType, Network
from hntwallet.signing import sign_txn, verify_txn
from hntwallet.transactions import BlockchainTxnPaymentV1, in_envelope

payer = Keypair.generate(KeyType.ED25519, Network.MAINNET)
payee = Keypair.generate(KeyType.ED25519, Network.MAINNET)

txn = BlockchainTxnPaymentV1(
    payer=bytes(payer.public_key),
    payee=bytes(payee.public_key),
    amount=10_000,
    nonce=1,
)
txn.fee = txn_fee(txn, TxnFeeConfig.legacy())
txn.signature = sign_txn(txn, payer)
verify_txn(txn, payer.public_key, txn.signature)

encoded = in_envelope(txn).to_b64()
```

Deriving a wallet key from a password, and splitting a sharded format:

```python
from hntwallet.format import basic, sharded_default
from hntwallet.pwhash import pbkdf2

password = "password"

key = basic(pbkdf2(1000)).derive_key(password.encode())

fmt = sharded_default(pbkdf2(1000))
sharded_key = fmt.derive_key(password.encode())
first, *others = fmt.shards()
for shard in others[:2]:
    first.absorb(shard)
assert first.derive_key(password.encode()) == sharded_key
```

A chain-variable transaction:

```python
from hntwallet.chain_vars import build_vars_txn, parse_var_set
from hntwallet.txn_json import vars_txn_to_json

var = parse_var_set("poc_version=10")
txn = build_vars_txn([var], [], [], [], None, {"nonce": 4})
print(vars_txn_to_json(txn))  # nonce 5, var typed "int"
```

## What the package does not do

- There is no command-line program; everything is used from Python.
- It does not read or write encrypted wallet files; `hntwallet.format`
  derives the encryption key and stores shard data, but the wallet file
  layout and encryption are not included.
- It does not produce mnemonic phrases for keypairs.
- Apart from `StakingClient`, it does not talk to the blockchain API:
  balances, chain variables and transaction submission must be fetched
  and sent by the caller.