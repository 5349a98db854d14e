from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from moddef import ModuleRegistry, configure_logging

logger = logging.getLogger("moddef.demo")


def run_demo(registry: Optional[ModuleRegistry] = None) -> Dict[str, Any]:
    """Register the sample modules and report what they compute.

    Args:
        registry: Registry to populate; a fresh one is used when omitted.

    Returns:
        Dict[str, Any]: Values computed by the ``test`` module.
    """
    registry = registry if registry is not None else ModuleRegistry()

    registry.define("HMY", {"version": "4.0"})

    def tool(require, exports, module, hmy):
        logger.info("tool sees HMY %s (injected %s)", require("HMY"), hmy)
        exports.add = lambda x, y: x + y

    registry.define("tool", ["HMY"], tool)

    def plus(require, exports, module, tools):
        add = tools.add
        logger.info("plus: add(8, 1) = %s", add(8, 1))
        module.id = "plus"

        def double(x):
            return add(x, x)

        def triple(x):
            return add(double(x), x)

        exports.half = lambda x: x / 2
        return {"double": double, "triple": triple}

    registry.define(["tool"], plus)

    def test(require, exports, module):
        plus_exports = require("plus")
        exports.half = plus_exports.half(8)
        exports.double = plus_exports.double(8)
        exports.triple = plus_exports.triple(8)
        seen = []
        exports.all = require(["HMY", "plus"], seen.append)
        exports.callbacks = len(seen)

    registry.define("test", test)

    results = dict(vars(registry.require("test")))
    logger.info("half=%s double=%s triple=%s", results["half"], results["double"], results["triple"])
    logger.info("registered modules: %s", registry.snapshot().ids())
    return results


if __name__ == "__main__":
    configure_logging()
    run_demo()
