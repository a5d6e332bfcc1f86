# src/plantree/core/remote.py
"""
Persistent problem state stored in Redis.

Keys (per namespace):
  {ns}:instances     hash   name -> type
  {ns}:predicates    set    "(name a b)"
  {ns}:functions     hash   "(name a b)" -> value

The active namespace itself lives in Redis under NAMESPACE_KEY.
"""

import redis

from plantree.core.facts import Instance, Predicate, Function, parse_predicate
from plantree.core.state import StateBackend, LocalState


NAMESPACE_KEY = "plantree:state:namespace"
DEFAULT_NAMESPACE = "default"


def get_redis(host: str = "localhost", port: int = 6379, db: int = 0) -> redis.Redis:
    return redis.Redis(host=host, port=port, db=db)


def get_namespace(client: redis.Redis) -> str:
    value = client.get(NAMESPACE_KEY)
    if value is None:
        return DEFAULT_NAMESPACE
    return value.decode()


def set_namespace(client: redis.Redis, namespace: str) -> None:
    client.set(NAMESPACE_KEY, namespace)


class RedisState(StateBackend):
    def __init__(self, client: redis.Redis, namespace: str | None = None):
        self.client = client
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        if self._namespace is not None:
            return self._namespace
        return get_namespace(self.client)

    def _instances_key(self) -> str:
        return f"plantree:{self.namespace}:instances"

    def _predicates_key(self) -> str:
        return f"plantree:{self.namespace}:predicates"

    def _functions_key(self) -> str:
        return f"plantree:{self.namespace}:functions"

    # === Instances ===

    def add_instance(self, instance: Instance) -> None:
        self.client.hset(self._instances_key(), instance.name, instance.type)

    def get_instances(self) -> list[Instance]:
        data = self.client.hgetall(self._instances_key())
        return sorted(
            (Instance(k.decode(), v.decode()) for k, v in data.items()),
            key=lambda i: i.name,
        )

    def instances(self) -> list[str]:
        return [i.name for i in self.get_instances()]

    # === Predicates ===

    def exists(self, predicate: Predicate) -> bool:
        return bool(self.client.sismember(self._predicates_key(), predicate.key))

    def add(self, predicate: Predicate) -> bool:
        """Fails when an argument is not a declared instance."""
        known = self.client.hkeys(self._instances_key())
        if known:
            names = {k.decode() for k in known}
            if any(p not in names for p in predicate.parameters):
                return False
        self.client.sadd(self._predicates_key(), predicate.key)
        return True

    def remove(self, predicate: Predicate) -> bool:
        self.client.srem(self._predicates_key(), predicate.key)
        return True

    def get_predicates(self) -> list[Predicate]:
        members = self.client.smembers(self._predicates_key())
        return sorted((parse_predicate(m.decode()) for m in members), key=lambda p: p.key)

    # === Functions ===

    def read_function(self, key: str) -> float | None:
        value = self.client.hget(self._functions_key(), key)
        if value is None:
            return None
        return float(value.decode())

    def write_function(self, function: Function) -> bool:
        self.client.hset(self._functions_key(), function.key, repr(float(function.value)))
        return True

    def get_functions(self) -> list[Function]:
        data = self.client.hgetall(self._functions_key())
        functions = []
        for key, value in data.items():
            head = parse_predicate(key.decode())
            functions.append(Function(head.name, head.parameters, float(value.decode())))
        return sorted(functions, key=lambda f: f.key)

    # === Whole state ===

    def snapshot(self) -> LocalState:
        """Copy the persistent state into a local snapshot."""
        return LocalState(self.get_predicates(), self.get_functions())

    def load(self, state: LocalState) -> None:
        for predicate in state.predicates:
            self.client.sadd(self._predicates_key(), predicate.key)
        for function in state.functions:
            self.write_function(function)

    def clear(self) -> None:
        for key in self.client.scan_iter(f"plantree:{self.namespace}:*"):
            self.client.delete(key)
