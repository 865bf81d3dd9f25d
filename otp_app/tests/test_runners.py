"""
Runner Script Tests

Exercises the command-line entry points and their exit codes.
"""

import io
import os
import shutil
import socket
import tempfile
import threading
import unittest
from unittest.mock import patch

from ..common.cipher import ALPHABET
from ..common.config import ProtocolConfig
from ..otp_protocol.protocol import Service
from ..otp_protocol.server import create_server
from .. import run_client, run_keygen, run_server


class TestKeygenRunner(unittest.TestCase):
    """Tests for the keygen entry point"""

    def test_prints_key_and_newline(self):
        with patch('sys.stdout', new_callable=io.StringIO) as stdout:
            status = run_keygen.main(["25"])
        self.assertEqual(status, 0)
        output = stdout.getvalue()
        self.assertEqual(len(output), 26)
        self.assertTrue(output.endswith("\n"))
        self.assertTrue(set(output[:-1]) <= set(ALPHABET))

    def test_usage_errors_exit_1(self):
        for argv in ([], ["0"], ["-4"], ["ten"], ["1", "2"]):
            with self.subTest(argv=argv):
                with patch('sys.stderr', new_callable=io.StringIO) as stderr:
                    with self.assertRaises(SystemExit) as cm:
                        run_keygen.main(argv)
                self.assertEqual(cm.exception.code, 1)
                self.assertIn("usage", stderr.getvalue())


class TestClientRunner(unittest.TestCase):
    """Tests for the client entry point against a live enc server"""

    @classmethod
    def setUpClass(cls):
        cls.server = create_server(0, Service.ENCRYPT, ProtocolConfig(host='localhost'), "thread")
        cls.server_thread = threading.Thread(target=cls.server.serve_forever)
        cls.server_thread.daemon = True
        cls.server_thread.start()
        cls.port = str(cls.server.server_address[1])

    @classmethod
    def tearDownClass(cls):
        cls.server.shutdown()
        cls.server_thread.join(timeout=5)
        cls.server.server_close()

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def write(self, name, content: bytes) -> str:
        path = os.path.join(self.temp_dir, name)
        with open(path, 'wb') as f:
            f.write(content)
        return path

    def run_client(self, argv, service=None):
        with patch('sys.stdout', new_callable=io.StringIO) as stdout, \
                patch('sys.stderr', new_callable=io.StringIO):
            status = run_client.main(argv, service=service)
        return status, stdout.getvalue()

    def test_encrypts_file(self):
        """The result is printed followed by a newline"""
        text = self.write("plaintext", b"HELLO\n")
        key = self.write("key", b"WORLD\n")
        status, output = self.run_client([text, key, self.port, "--host", "localhost"])
        self.assertEqual(status, 0)
        self.assertEqual(output, "CSBWR\n")

    def test_service_flag(self):
        text = self.write("plaintext", b"HELLO\n")
        key = self.write("key", b"WORLD\n")
        status, _ = self.run_client([text, key, self.port, "--service", "enc"])
        self.assertEqual(status, 0)

    def test_wrong_service_exits_2(self):
        """A dec client talking to an enc server exits with status 2"""
        text = self.write("ciphertext", b"CSBWR\n")
        key = self.write("key", b"WORLD\n")
        status, output = self.run_client([text, key, self.port], service=Service.DECRYPT)
        self.assertEqual(status, 2)
        self.assertEqual(output, "")

    def test_bad_input_exits_1(self):
        good = self.write("good", b"HELLO\n")
        bad = self.write("bad", b"HELLO$\n")
        short_key = self.write("short", b"ABC\n")
        missing = os.path.join(self.temp_dir, "missing")
        for argv in ([bad, good, self.port], [good, short_key, self.port],
                     [missing, good, self.port]):
            with self.subTest(argv=argv):
                status, output = self.run_client(argv)
                self.assertEqual(status, 1)
                self.assertEqual(output, "")

    def test_connection_failure_exits_1(self):
        probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        probe.bind(('localhost', 0))
        port = str(probe.getsockname()[1])
        probe.close()
        text = self.write("plaintext", b"HELLO\n")
        status, _ = self.run_client([text, text, port])
        self.assertEqual(status, 1)

    def test_usage_error_exits_1(self):
        for argv in ([], ["a", "b"], ["a", "b", "notaport"], ["a", "b", "99999"]):
            with self.subTest(argv=argv):
                with patch('sys.stderr', new_callable=io.StringIO):
                    with self.assertRaises(SystemExit) as cm:
                        run_client.main(argv)
                self.assertEqual(cm.exception.code, 1)


class TestServerRunner(unittest.TestCase):
    """Tests for the server entry point"""

    def test_usage_error_exits_1(self):
        for argv in ([], ["0"], ["70000"], ["8000", "--service", "xyz"],
                     ["8000", "--chunk-size", "1"]):
            with self.subTest(argv=argv):
                with patch('sys.stderr', new_callable=io.StringIO):
                    with self.assertRaises(SystemExit) as cm:
                        run_server.main(argv)
                self.assertEqual(cm.exception.code, 1)

    @patch('otp_app.run_server.signal.signal')
    def test_bind_failure_exits_1(self, _signal):
        holder = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        holder.bind(('', 0))
        holder.listen(1)
        try:
            port = str(holder.getsockname()[1])
            with patch('sys.stderr', new_callable=io.StringIO):
                self.assertEqual(run_server.main([port, "--log-level", "ERROR"]), 1)
        finally:
            holder.close()

    @patch('otp_app.run_server.serve')
    @patch('otp_app.run_server.signal.signal')
    def test_interrupt_exits_0(self, _signal, serve):
        """Ctrl+C ends the server cleanly"""
        serve.side_effect = KeyboardInterrupt()
        with patch('sys.argv', ["dec_server", "57172", "--isolation", "thread"]):
            self.assertEqual(run_server.dec_server(), 0)
        port, service, config, isolation = serve.call_args[0]
        self.assertEqual(port, 57172)
        self.assertIs(service, Service.DECRYPT)
        self.assertEqual(config.backlog, 5)
        self.assertEqual(isolation, "thread")


if __name__ == '__main__':
    unittest.main()
