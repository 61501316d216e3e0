# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for plugin registration, configuration and the logging plugin."""

import pytest
from pydantic import ValidationError

from genro_navroutes import Router
from genro_navroutes.plugins._base_plugin import BasePlugin
from genro_navroutes.plugins.logging import LoggingPlugin


class DummyLogger:
    def __init__(self):
        self.records = []

    def has_handlers(self):
        return True

    def info(self, message):
        self.records.append(message)


class TracePlugin(BasePlugin):
    plugin_code = "trace"
    plugin_description = "Records dispatched routes"

    __slots__ = ("seen", "registered")

    def __init__(self, router, **config):
        self.seen = []
        self.registered = []
        super().__init__(router, **config)

    def configure(self, enabled: bool = True, label: str = "trace"):
        pass

    def on_register(self, router, binding):
        self.registered.append(binding.name)

    def chain_handler(self, request, chain, next):
        self.seen.append((self.configuration(chain.name).get("label", "trace"), chain.route))
        return next()


Router.register_plugin(TracePlugin)


def terminal(log):
    def handler(request, chain, next):
        log.append(chain.route)

    return handler


# --- registry ---------------------------------------------------------------


def test_logging_plugin_is_registered_on_import():
    assert Router.available_plugins()["logging"] is LoggingPlugin


def test_register_plugin_validates_class():
    with pytest.raises(TypeError):
        Router.register_plugin(object)  # type: ignore[arg-type]

    class Nameless(BasePlugin):
        pass

    with pytest.raises(ValueError, match="plugin_code"):
        Router.register_plugin(Nameless)


def test_register_plugin_detects_collisions_unless_named():
    class OtherTrace(BasePlugin):
        plugin_code = "trace"

    with pytest.raises(ValueError, match="already registered"):
        Router.register_plugin(OtherTrace)
    Router.register_plugin(OtherTrace, name="trace_alt")
    assert Router.available_plugins()["trace_alt"] is OtherTrace
    Router.register_plugin(TracePlugin)


def test_plug_rejects_unknown_duplicate_and_non_string():
    router = Router().plug("trace")
    with pytest.raises(ValueError, match="Unknown plugin"):
        router.plug("missing")
    with pytest.raises(ValueError, match="already attached"):
        router.plug("trace")
    with pytest.raises(TypeError):
        router.plug(TracePlugin)  # type: ignore[arg-type]


def test_attached_plugin_is_reachable_by_name():
    router = Router().plug("trace")
    assert isinstance(router.trace, TracePlugin)
    assert router.iter_plugins() == [router.trace]
    with pytest.raises(AttributeError):
        router.missing_plugin  # noqa: B018


# --- dispatch ---------------------------------------------------------------


def test_plugin_handler_runs_before_global_handlers():
    log = []
    router = Router().plug("trace")

    def global_handler(request, chain, next):
        log.append(("global", router.trace.seen[:]))
        next()

    router.use(global_handler)
    router.add("/a", terminal(log))
    router.navigate("/a")
    assert log == [("global", [("trace", "/a")]), "/a"]


def test_on_register_sees_existing_and_new_routes():
    log = []
    router = Router()
    router.add("/before", terminal(log))
    router.plug("trace")
    router.add("/after", terminal(log))
    assert router.trace.registered == ["/before", "/after"]


def test_route_options_become_per_route_config():
    log = []
    router = Router().plug("trace", label="global")
    router.add("/a", terminal(log), trace_label="local")
    router.add("/b", terminal(log))
    router.navigate("/a")
    router.navigate("/b")
    assert router.trace.seen == [("local", "/a"), ("global", "/b")]
    assert router.get_config("trace", "/a")["label"] == "local"
    assert router.get_config("trace")["label"] == "global"


def test_configure_validates_values():
    router = Router().plug("trace")
    with pytest.raises(ValidationError):
        router.trace.configure(enabled="not-a-bool")


def test_configure_with_comma_separated_targets():
    router = Router().plug("trace")
    router.trace.configure(_target="/a,/b", label="both")
    assert router.get_config("trace", "/a")["label"] == "both"
    assert router.get_config("trace", "/b")["label"] == "both"
    assert "label" not in router.get_config("trace")


def test_plugin_enable_resolution_order():
    log = []
    router = Router().plug("trace")
    router.add("/a", terminal(log))
    assert router.is_plugin_enabled("/a", "trace")

    router.trace.configure(enabled=False)
    assert not router.is_plugin_enabled("/a", "trace")

    router.trace.configure(_target="/a", enabled=True)
    assert router.is_plugin_enabled("/a", "trace")

    router.set_plugin_enabled("/a", "trace", False)
    assert not router.is_plugin_enabled("/a", "trace")

    router.navigate("/a")
    assert router.trace.seen == []
    assert log == ["/a"]


def test_plugin_state_is_per_router():
    first = Router().plug("trace")
    second = Router().plug("trace")
    first.add("/a", terminal([]))
    first.navigate("/a")
    assert len(first.trace.seen) == 1
    assert second.trace.seen == []
    with pytest.raises(AttributeError):
        Router().set_plugin_enabled("/a", "trace", False)


# --- logging plugin ---------------------------------------------------------


def test_logging_plugin_logs_start_and_end():
    logger = DummyLogger()
    router = Router().plug("logging", logger=logger)
    router.add("/inbox", terminal([]))
    router.navigate("/inbox")
    assert logger.records[0] == "/inbox start (/inbox)"
    assert logger.records[1].startswith("/inbox end (")
    assert logger.records[1].endswith(" ms)")


def test_logging_plugin_uses_route_name():
    logger = DummyLogger()
    router = Router().plug("logging", logger=logger)
    router.add("/user/:id", terminal([]), name="user")
    router.navigate("/user/7")
    assert logger.records[0] == "user start (/user/7)"


def test_logging_plugin_respects_route_flags():
    logger = DummyLogger()
    router = Router().plug("logging", logger=logger)
    router.add("/quiet", terminal([]), logging_flags="enabled:off")
    router.navigate("/quiet")
    assert logger.records == []


def test_logging_plugin_runtime_flags():
    logger = DummyLogger()
    router = Router().plug("logging", logger=logger)
    router.logging.configure(flags="before:off,after:on")
    router.add("/ping", terminal([]))
    router.navigate("/ping")
    assert len(logger.records) == 1
    assert logger.records[0].startswith("/ping end (")


def test_logging_plugin_per_route_option():
    logger = DummyLogger()
    router = Router().plug("logging", logger=logger)
    router.add("/ping", terminal([]), logging_after=False)
    router.navigate("/ping")
    assert logger.records == ["/ping start (/ping)"]


def test_logging_plugin_print_sink(capsys):
    logger = DummyLogger()
    router = Router().plug("logging", logger=logger, print=True)
    router.add("/p", terminal([]))
    router.navigate("/p")
    out = capsys.readouterr().out
    assert "/p start (/p)" in out
    assert logger.records == []


def test_logging_plugin_falls_back_to_print_without_handlers(capsys):
    class SilentLogger(DummyLogger):
        def has_handlers(self):
            return False

    logger = SilentLogger()
    router = Router().plug("logging", logger=logger, after=False)
    router.add("/p", terminal([]))
    router.navigate("/p")
    assert capsys.readouterr().out == "/p start (/p)\n"
    assert logger.records == []


def test_logging_plugin_times_the_rest_of_the_chain():
    logger = DummyLogger()
    order = []

    def middleware(request, chain, next):
        order.append(len(logger.records))
        next()

    router = Router().plug("logging", logger=logger)
    router.add("/t", middleware, terminal([]))
    router.navigate("/t")
    assert order == [1]
    assert len(logger.records) == 2
