"""
Tests for ParameterSet validation.

Covers defaults, digit-only numeric fields, unknown keys, derived
pidfile/config paths and the read-only accessors.
"""

import json

import pytest
from pydantic import ValidationError

from zkservice.core.errors import ParameterError
from zkservice.service.models import ServiceStatus
from zkservice.service.materialize import render_config
from zkservice.service.params import ParameterSet, ServerEntry


class TestDefaults:
    """Defaults applied when keys are absent."""

    def test_minimum_config_defaults(self):
        params = ParameterSet.from_mapping({})

        assert params.client_port == 2181
        assert params.data_dir == "/var/lib/zookeeper"
        assert params.tick_time == 2000
        assert params.myid == 1
        assert params.java_cmd_opt == ""
        assert params.servers is None

    def test_paths_derived_from_client_port(self):
        params = ParameterSet.from_mapping({"clientPort": "2182"})

        assert params.pidfile == "/tmp/zookeeper.2182.pid"
        assert params.gen_cfg == "/tmp/zoo.2182.cfg"

    def test_distinct_ports_never_share_paths(self):
        a = ParameterSet.from_mapping({"clientPort": 2181})
        b = ParameterSet.from_mapping({"clientPort": 2182})

        assert a.pidfile != b.pidfile
        assert a.gen_cfg != b.gen_cfg

    def test_explicit_paths_kept(self):
        params = ParameterSet.from_mapping({"pidfile": "/run/zk.pid", "gen_cfg": "/etc/zk/zoo.cfg"})

        assert params.pidfile == "/run/zk.pid"
        assert params.gen_cfg == "/etc/zk/zoo.cfg"

    def test_empty_paths_fall_back_to_defaults(self):
        params = ParameterSet.from_mapping({"pidfile": "", "gen_cfg": ""})

        assert params.pidfile == "/tmp/zookeeper.2181.pid"
        assert params.gen_cfg == "/tmp/zoo.2181.cfg"


class TestNumericFields:
    """Numeric keys accept digits only."""

    @pytest.mark.parametrize("value", [2000, "2000", 0, "0"])
    def test_accepts_digits(self, value):
        params = ParameterSet.from_mapping({"tickTime": value})
        assert params.tick_time == int(value)

    @pytest.mark.parametrize("value", [-1, "-1", "1.5", 1.5, True, "abc", " 12", "12 ", ""])
    def test_rejects_non_digits(self, value):
        with pytest.raises(ParameterError) as exc_info:
            ParameterSet.from_mapping({"tickTime": value})

        assert exc_info.value.keys == ["tickTime"]
        assert "tickTime" in str(exc_info.value)

    def test_dotted_key(self):
        params = ParameterSet.from_mapping({"jute.maxbuffer": "1048576"})
        assert params.jute_maxbuffer == 1048576

        with pytest.raises(ParameterError) as exc_info:
            ParameterSet.from_mapping({"jute.maxbuffer": "1M"})
        assert exc_info.value.keys == ["jute.maxbuffer"]

    def test_myid_must_be_positive(self):
        assert ParameterSet.from_mapping({"myid": "3"}).myid == 3

        with pytest.raises(ParameterError) as exc_info:
            ParameterSet.from_mapping({"myid": 0})
        assert exc_info.value.keys == ["myid"]

    def test_invalid_client_port_reported_once(self):
        with pytest.raises(ParameterError) as exc_info:
            ParameterSet.from_mapping({"clientPort": "port"})

        assert exc_info.value.keys == ["clientPort"]

    def test_snake_case_names_accepted(self):
        params = ParameterSet.from_mapping({"client_port": 3000, "tick_time": 100})

        assert params.client_port == 3000
        assert params.pidfile == "/tmp/zookeeper.3000.pid"


class TestShape:
    """Unknown keys and container shapes."""

    def test_unknown_key_rejected(self):
        with pytest.raises(ParameterError) as exc_info:
            ParameterSet.from_mapping({"clientPort": 2181, "bogus": 1})

        assert exc_info.value.keys == ["bogus"]
        assert "unknown parameter" in str(exc_info.value)

    def test_all_errors_reported(self):
        with pytest.raises(ParameterError) as exc_info:
            ParameterSet.from_mapping({"initLimit": "x", "syncLimit": "y", "extra": 1})

        assert set(exc_info.value.keys) == {"initLimit", "syncLimit", "extra"}

    def test_non_mapping_rejected(self):
        with pytest.raises(ParameterError):
            ParameterSet.from_mapping([("clientPort", 2181)])

    def test_servers_must_be_mapping(self):
        with pytest.raises(ParameterError) as exc_info:
            ParameterSet.from_mapping({"servers": ["h1:2888:3888"]})

        assert exc_info.value.keys == ["servers"]

    def test_server_ids_coerced_to_int(self):
        params = ParameterSet.from_mapping({
            "servers": {"2": {"server": "h2:2888:3888"}, "1": {"server": "h1:2888:3888"}},
        })

        assert [sid for sid, _ in params.server_entries()] == [1, 2]

    def test_server_entry_without_server_accepted_at_construction(self):
        params = ParameterSet.from_mapping({"servers": {1: {"weight": 2}}})
        assert params.servers[1] == ServerEntry(weight=2)
        assert params.servers[1].server is None

    def test_string_fields_reject_containers(self):
        with pytest.raises(ParameterError) as exc_info:
            ParameterSet.from_mapping({"dataDir": ["/tmp"]})

        assert exc_info.value.keys == ["dataDir"]

    def test_string_fields_accept_numbers(self):
        params = ParameterSet.from_mapping({"forceSync": 1, "clientPortAddress": 0})

        assert params.force_sync == "1"
        assert params.client_port_address == "0"
        assert ("forceSync", "1") in params.config_items()

    def test_unbalanced_launch_options_rejected(self):
        with pytest.raises(ParameterError) as exc_info:
            ParameterSet.from_mapping({"java_cmd_opt": '-Dzookeeper.name="my zk'})

        assert exc_info.value.keys == ["java_cmd_opt"]

    def test_quoted_launch_options_accepted(self):
        params = ParameterSet.from_mapping({"java_cmd_opt": '-Dzookeeper.name="my zk"'})
        assert params.java_cmd_opt == '-Dzookeeper.name="my zk"'

    def test_liveness_check_must_be_callable(self):
        params = ParameterSet.from_mapping({"status": lambda: ServiceStatus.RUNNING})
        assert params.liveness_check() is ServiceStatus.RUNNING

        with pytest.raises(ParameterError) as exc_info:
            ParameterSet.from_mapping({"status": "running"})
        assert exc_info.value.keys == ["status"]


class TestImmutability:

    def test_fields_cannot_be_reassigned(self):
        params = ParameterSet.from_mapping({})

        with pytest.raises(ValidationError):
            params.client_port = 9999

        assert params.client_port == 2181

    def test_servers_cannot_be_modified(self, tmp_path):
        params = ParameterSet.from_mapping({
            "dataDir": str(tmp_path),
            "servers": {1: {"server": "h1:2888:3888", "weight": 2}},
        })
        before = render_config(params)

        with pytest.raises(TypeError):
            params.servers[7] = {"server": "h7:2888:3888"}
        with pytest.raises(ValidationError):
            params.servers[1].server = "h9:2888:3888"

        assert list(params.servers) == [1]
        assert render_config(params) == before

    def test_source_servers_not_shared(self):
        source = {1: {"server": "h1:2888:3888"}}
        params = ParameterSet.from_mapping({"servers": source})

        source[1]["server"] = "h9:2888:3888"
        source[2] = {"server": "h2:2888:3888"}

        assert [(sid, e.server) for sid, e in params.server_entries()] == [(1, "h1:2888:3888")]


class TestAccessors:

    def test_effective_port_prefers_explicit_port(self):
        assert ParameterSet.from_mapping({"clientPort": 2181}).effective_port == 2181
        assert ParameterSet.from_mapping({"clientPort": 2181, "port": "2191"}).effective_port == 2191

    def test_resolve_user(self):
        assert ParameterSet.from_mapping({"user": "zookeeper"}).resolve_user(lambda: "root") == "zookeeper"
        assert ParameterSet.from_mapping({}).resolve_user(lambda: "root") == "root"
        assert ParameterSet.from_mapping({}).resolve_user() is None

    def test_service_log_aliases(self):
        assert ParameterSet.from_mapping({"ubic_log": "/var/log/a.log"}).service_log == "/var/log/a.log"
        assert ParameterSet.from_mapping({"service_log": "/var/log/b.log"}).service_log == "/var/log/b.log"

    def test_config_items_sorted_and_scalar_only(self):
        params = ParameterSet.from_mapping({
            "tickTime": 2000,
            "initLimit": 10,
            "syncLimit": 5,
            "dataLogDir": "/var/log/zookeeper",
            "myid": 2,
            "user": "zookeeper",
            "port": 2191,
            "java_cmd_opt": "-Xmx1g",
            "servers": {1: {"server": "h1:2888:3888"}},
        })

        keys = [key for key, _ in params.config_items()]
        assert keys == sorted(keys)
        assert keys == ["clientPort", "dataDir", "dataLogDir", "initLimit", "syncLimit", "tickTime"]


class TestFromFile:

    def test_from_file(self, tmp_path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"clientPort": 2281, "servers": {"1": {"server": "h1:2888:3888"}}}))

        params = ParameterSet.from_file(path)

        assert params.client_port == 2281
        assert params.servers[1].server == "h1:2888:3888"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ParameterSet.from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "params.json"
        path.write_text("{not json")

        with pytest.raises(ParameterError):
            ParameterSet.from_file(path)
