"""
Unit tests for the text oracle client.
"""

import time
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from ats_matching.errors import OracleCallError, OracleTimeoutError
from ats_matching.oracle import TextOracle, get_model_config, response_text


def agent_returning(content=None, error=None):
    agent = MagicMock()
    if error is not None:
        agent.run.side_effect = error
    else:
        agent.run.return_value = SimpleNamespace(content=content)
    return agent


class TestModelConfig(unittest.TestCase):

    def test_temperature_supported(self):
        self.assertEqual(get_model_config("gpt-4o", 0.6, "sk-test"),
                         {"id": "gpt-4o", "api_key": "sk-test", "temperature": 0.6})

    def test_temperature_dropped_for_reasoning_models(self):
        self.assertNotIn("temperature", get_model_config("o1-mini", 0))
        self.assertNotIn("api_key", get_model_config("o1-mini", 0))


class TestResponseText(unittest.TestCase):

    def test_shapes(self):
        self.assertEqual(response_text(SimpleNamespace(content="hi")), "hi")
        self.assertEqual(response_text(SimpleNamespace(content=None)), "")
        self.assertEqual(response_text(None), "")
        self.assertEqual(response_text("plain"), "plain")


class TestComplete(unittest.TestCase):

    def test_returns_stripped_text(self):
        oracle = TextOracle(model_name="gpt-4o")
        with patch.object(TextOracle, "build_agent", return_value=agent_returning("  {\"a\": 1}\n")) as build:
            self.assertEqual(oracle.complete("prompt", 0), '{"a": 1}')
        build.assert_called_once_with(0)

    def test_empty_content_is_a_call_error(self):
        oracle = TextOracle()
        with patch.object(TextOracle, "build_agent", return_value=agent_returning("   ")):
            with self.assertRaises(OracleCallError):
                oracle.complete("prompt", 0)

    def test_transport_failure_is_a_call_error(self):
        oracle = TextOracle()
        with patch.object(TextOracle, "build_agent", return_value=agent_returning(error=ConnectionError("reset"))):
            with self.assertRaises(OracleCallError) as ctx:
                oracle.complete("prompt", 0)
        self.assertIn("reset", str(ctx.exception))

    def test_temperature_out_of_range(self):
        oracle = TextOracle()
        for temperature in (-0.1, 1.5):
            with self.subTest(temperature=temperature):
                with self.assertRaises(ValueError):
                    oracle.complete("prompt", temperature)


class TestAsyncComplete(unittest.IsolatedAsyncioTestCase):

    async def test_runs_in_worker_thread(self):
        oracle = TextOracle()
        with patch.object(TextOracle, "build_agent", return_value=agent_returning("done")):
            self.assertEqual(await oracle.acomplete("prompt", 0), "done")

    async def test_timeout(self):
        oracle = TextOracle(timeout_seconds=0.05)
        agent = MagicMock()
        agent.run.side_effect = lambda prompt: time.sleep(0.3) or SimpleNamespace(content="late")
        with patch.object(TextOracle, "build_agent", return_value=agent):
            with self.assertRaises(OracleTimeoutError) as ctx:
                await oracle.acomplete("prompt", 0)
        self.assertIn("took too long", ctx.exception.user_message)


if __name__ == "__main__":
    unittest.main()
