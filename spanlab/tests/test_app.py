"""Tests for application wiring and the command line."""

import io
import os
import unittest
from unittest import mock

from opentelemetry.resource.detector.containerid import ContainerResourceDetector
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from spanlab import app
from spanlab.config import load_config
from spanlab.errors import InitializationError
from spanlab.processors import SamplingPolicy
from spanlab.resource import (
    HostResourceDetector,
    WeekdayResourceDetector,
    build_resource,
    default_detectors,
)


def quiet_config(**exporters):
    overrides = {
        "exporters": {"enable_otlp": False, "enable_console": False, **exporters},
        "resource": {"detect": False},
    }
    with mock.patch("spanlab.config.find_config_file", return_value=None):
        return load_config(overrides=overrides)


class TestInit(unittest.TestCase):
    def test_console_exporter_writes_spans(self):
        stream = io.StringIO()
        provider = app.init(quiet_config(enable_console=True, console_pretty=False), stream=stream)
        workshop = app.Workshop(provider)

        results = workshop.run(["Foo"], out=io.StringIO())
        self.assertTrue(provider.shutdown(timeout=5))

        self.assertEqual(results, {"Foo": None})
        self.assertIn("name=InsertUser", stream.getvalue())
        self.assertIn("name=LogOperation", stream.getvalue())

    def test_resource_attributes(self):
        provider = app.init(quiet_config())
        attrs = provider.resource.attributes
        self.assertEqual(attrs["service.name"], "Workshop App")
        self.assertEqual(attrs["service.version"], "v1.0.0")
        self.assertEqual(attrs["foo"], "bar")
        self.assertIn("telemetry.sdk.language", attrs)
        provider.shutdown(timeout=5)

    def test_sampler_override(self):
        provider = app.init(quiet_config(), sampler=SamplingPolicy.always_off())
        self.assertIn("AlwaysOff", provider.sampler.get_description())
        provider.shutdown(timeout=5)

    def test_bad_endpoint_is_initialization_error(self):
        with self.assertRaises(InitializationError):
            app.init(quiet_config(enable_otlp=True, endpoint="localhost:notaport"))


class TestWorkshop(unittest.TestCase):
    def test_rejected_user_is_reported_not_raised(self):
        provider = app.init(quiet_config())
        exporter = InMemorySpanExporter()
        provider.add_exporter(exporter, batch=False)

        results = app.Workshop(provider).run(["Foo", "Bar"], propagation=True, out=io.StringIO())
        provider.shutdown(timeout=5)

        self.assertIsNone(results["Foo"])
        self.assertIn("Bar", results["Bar"])
        names = sorted(span.name for span in exporter.get_finished_spans())
        self.assertEqual(names, ["InsertUser", "InsertUser", "LogOperation", "Receiver", "Sender"])
        traces = {span.context.trace_id for span in exporter.get_finished_spans()}
        self.assertEqual(len(traces), 3)


class TestResource(unittest.TestCase):
    def test_env_attributes_win(self):
        with mock.patch.dict(os.environ, {"OTEL_RESOURCE_ATTRIBUTES": "foo=env,deployment=lab"}):
            resource = build_resource("svc", attributes={"foo": "bar"}, detectors=[])
        self.assertEqual(resource.attributes["foo"], "env")
        self.assertEqual(resource.attributes["deployment"], "lab")

    def test_custom_detectors(self):
        resource = build_resource("svc", detectors=[HostResourceDetector(), WeekdayResourceDetector()])
        self.assertIn("host.name", resource.attributes)
        self.assertIn(
            resource.attributes["Weekday"],
            ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
        )

    def test_failing_detector_is_skipped(self):
        class Broken(HostResourceDetector):
            def detect(self):
                raise RuntimeError("no host")

        resource = build_resource("svc", detectors=[Broken(), WeekdayResourceDetector()])
        self.assertEqual(resource.attributes["service.name"], "svc")
        self.assertIn("Weekday", resource.attributes)

    def test_default_detectors_include_container(self):
        detectors = default_detectors()
        self.assertTrue(any(isinstance(d, ContainerResourceDetector) for d in detectors))

        # Outside a container the detector contributes nothing and does not fail
        resource = build_resource("svc", detectors=[ContainerResourceDetector()])
        self.assertEqual(resource.attributes["service.name"], "svc")


class TestMain(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.dict(os.environ, {"SPANLAB_ENABLE_OTLP": "false"})
        patcher.start()
        self.addCleanup(patcher.stop)
        finder = mock.patch("spanlab.config.find_config_file", return_value=None)
        finder.start()
        self.addCleanup(finder.stop)

    def test_missing_config_file_exits_1(self):
        with mock.patch("sys.stderr", new_callable=io.StringIO) as stderr:
            code = app.main(["--config", "/nonexistent/spanlab.toml", "--user", "Foo"])

        self.assertEqual(code, 1)
        self.assertIn("config file not found", stderr.getvalue())

    def test_runs_and_prints_spans(self):
        with mock.patch("sys.stdout", new_callable=io.StringIO) as stdout:
            code = app.main(["--user", "Foo", "--user", "Bar"])

        self.assertEqual(code, 0)
        output = stdout.getvalue()
        self.assertIn("User 'Foo' has been added", output)
        self.assertIn('"name": "InsertUser"', output)

    def test_bad_config_exits_1(self):
        with mock.patch("sys.stderr", new_callable=io.StringIO) as stderr:
            code = app.main(["--ratio", "3"])

        self.assertEqual(code, 1)
        self.assertIn("invalid configuration", stderr.getvalue())

    def test_flags_override_config(self):
        args = app.build_parser().parse_args(["--endpoint", "collector:4318", "--sampler", "ratio", "--ratio", "0.25", "--no-console"])
        config = load_config(overrides=app._overrides_from_args(args))

        self.assertEqual(config.exporters.endpoint, "collector:4318")
        self.assertEqual(config.sampling.sampler, "ratio")
        self.assertEqual(config.sampling.ratio, 0.25)
        self.assertFalse(config.exporters.enable_console)


if __name__ == "__main__":
    unittest.main()
