"""
Runtime configuration: CLI values first, then environment variables.

Environment (a `.env` file in the working directory is honoured):
  {NETWORK}_RPC_ENDPOINT                          e.g. CORE_RPC_ENDPOINT
  {NETWORK}_{KIND}_CONTRACT_ADDRESS_{VERSION}     e.g. SOKOL_KEYS_CONTRACT_ADDRESS_V2
  AVG_BLOCK_TIME_SECS                             poll interval, default 5
  SMTP_HOST_DOMAIN, SMTP_PORT, SMTP_USERNAME, SMTP_PASSWORD,
  OUTGOING_EMAIL_ADDRESS, EMAIL_RECIPIENTS        only with --email
"""

from __future__ import annotations
import json, os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

from dotenv import find_dotenv, load_dotenv
from eth_utils import is_address, to_checksum_address

from .adapters.notify_smtp import SmtpSettings
from .application.block_windows import StartBlock
from .domain.errors import ConfigError, EmissionV1NotSupported, InvalidAbi, InvalidContractAddress, MissingEnvVar
from .domain.models import ContractDescriptor
from .domain.value_types import Address, ContractKind, ContractVersion, Network

ABI_DIR = Path(__file__).parent / "abis"
DEFAULT_BLOCK_TIME_SECS = 5.0


@dataclass(frozen=True)
class Config:
    network: Network
    endpoint: str
    contracts: tuple[ContractDescriptor, ...]
    start_block: StartBlock
    poll_interval: float
    notification_limit: int | None = None
    smtp: SmtpSettings | None = None
    recipients: tuple[str, ...] = field(default=())
    log_emails: bool = False
    log_to_file: bool = False

    @property
    def email(self) -> bool:
        return self.smtp is not None


# ---------- env helpers ------------------------------------------------------

def load_env() -> None:
    load_dotenv(find_dotenv(usecwd=True), override=False)

def _require(env: Mapping[str, str], name: str) -> str:
    v = env.get(name, "").strip()
    if not v:
        raise MissingEnvVar(name)
    return v

def rpc_endpoint_var(network: Network) -> str:
    return f"{network.value.upper()}_RPC_ENDPOINT"

def contract_address_var(network: Network, kind: ContractKind, version: ContractVersion) -> str:
    return f"{network.value.upper()}_{kind.value.upper()}_CONTRACT_ADDRESS_{version.value.upper()}"

# ---------- contracts --------------------------------------------------------

def parse_address(s: str, source: str = "address") -> Address:
    s = s.strip()
    if not s.startswith("0x"):
        s = "0x" + s
    if not is_address(s):
        raise InvalidContractAddress(f"{source} is not a valid address: {s!r}")
    return Address(to_checksum_address(s))

def load_abi(kind: ContractKind, version: ContractVersion, abi_dir: Path = ABI_DIR) -> list[dict[str, Any]]:
    path = abi_dir / version.value / f"{kind.value}.json"
    try:
        abi = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise InvalidAbi(f"ABI file not found: {path}") from None
    except (OSError, ValueError) as e:
        raise InvalidAbi(f"invalid ABI file {path}: {e}") from e
    if not isinstance(abi, list) or not all(isinstance(x, dict) for x in abi):
        raise InvalidAbi(f"invalid ABI file {path}: expected a JSON array of objects")
    return abi

def load_contracts(
    network: Network,
    kinds: Sequence[ContractKind],
    version: ContractVersion,
    env: Mapping[str, str],
    abi_dir: Path = ABI_DIR,
) -> tuple[ContractDescriptor, ...]:
    if not kinds:
        raise ConfigError("select at least one contract: -k/--keys, -t/--threshold, -p/--proxy or -e/--emission")
    out: list[ContractDescriptor] = []
    for kind in dict.fromkeys(kinds):
        if kind is ContractKind.EMISSION and version is ContractVersion.V1:
            raise EmissionV1NotSupported()
        var = contract_address_var(network, kind, version)
        address = parse_address(_require(env, var), source=var)
        out.append(ContractDescriptor(kind, version, address, load_abi(kind, version, abi_dir)))
    return tuple(out)

# ---------- email ------------------------------------------------------------

def load_smtp(env: Mapping[str, str]) -> tuple[SmtpSettings, tuple[str, ...]]:
    port_s = _require(env, "SMTP_PORT")
    try:
        port = int(port_s)
    except ValueError:
        raise ConfigError(f"SMTP_PORT is not an integer: {port_s!r}") from None
    settings = SmtpSettings(
        host=_require(env, "SMTP_HOST_DOMAIN"),
        port=port,
        username=_require(env, "SMTP_USERNAME"),
        password=_require(env, "SMTP_PASSWORD"),
        sender=_require(env, "OUTGOING_EMAIL_ADDRESS"),
    )
    recipients = tuple(r.strip() for r in env.get("EMAIL_RECIPIENTS", "").split(",") if r.strip())
    return settings, recipients

# ---------- assembly ---------------------------------------------------------

def build_config(
    *,
    network: Network,
    kinds: Sequence[ContractKind],
    version: ContractVersion,
    start_block: StartBlock,
    rpc_url: str | None = None,
    block_time: float | None = None,
    notification_limit: int | None = None,
    email: bool = False,
    log_emails: bool = False,
    log_to_file: bool = False,
    env: Mapping[str, str] | None = None,
    abi_dir: Path = ABI_DIR,
) -> Config:
    env = os.environ if env is None else env
    endpoint = rpc_url or _require(env, rpc_endpoint_var(network))
    contracts = load_contracts(network, kinds, version, env, abi_dir)

    if block_time is None:
        raw = env.get("AVG_BLOCK_TIME_SECS", "").strip()
        try:
            block_time = float(raw) if raw else DEFAULT_BLOCK_TIME_SECS
        except ValueError:
            raise ConfigError(f"AVG_BLOCK_TIME_SECS is not a number: {raw!r}") from None
    if block_time <= 0:
        raise ConfigError(f"block time must be positive, got {block_time}")
    if notification_limit is not None and notification_limit < 0:
        raise ConfigError(f"notification limit must not be negative, got {notification_limit}")

    smtp, recipients = load_smtp(env) if email else (None, ())
    return Config(
        network=network,
        endpoint=endpoint,
        contracts=contracts,
        start_block=start_block,
        poll_interval=block_time,
        notification_limit=notification_limit,
        smtp=smtp,
        recipients=recipients,
        log_emails=log_emails,
        log_to_file=log_to_file,
    )
