"""
Tests for the FastAPI backend

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""

import struct
import unittest

from fastapi.testclient import TestClient

import api
from config import GeneratorConfig
from encoder import NECEncoder


class TestAPI(unittest.TestCase):
    """HTTP endpoints"""

    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(api.app)

    def setUp(self):
        api.limiter.reset()

    def test_root(self):
        response = self.client.get("/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "online")

    def test_security_headers(self):
        response = self.client.get("/")

        self.assertEqual(response.headers["X-Frame-Options"], "DENY")
        self.assertEqual(response.headers["X-Content-Type-Options"], "nosniff")
        self.assertIn("media-src 'self' blob:", response.headers["Content-Security-Policy"])

    def test_modulations(self):
        response = self.client.get("/api/modulations")
        styles = response.json()

        self.assertEqual(set(styles), {"differential", "square", "sine"})
        self.assertEqual(styles["differential"]["channels"], 2)
        self.assertEqual(styles["square"]["channels"], 1)

    def test_encode_hex(self):
        response = self.client.post("/api/encode/hex", json={"hex_code": "0x20DF10EF"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], "audio/wav")
        self.assertIn('filename="ir_command_20DF10EF_', response.headers["content-disposition"])
        self.assertEqual(response.content, NECEncoder().encode("0x20DF10EF"))

    def test_encode_hex_named(self):
        response = self.client.post("/api/encode/hex", json={"hex_code": "20DF40BF", "name": "vol up"})

        self.assertEqual(response.status_code, 200)
        self.assertIn("ir_command_vol_up_", response.headers["content-disposition"])

    def test_encode_address_command(self):
        response = self.client.post("/api/encode", json={"address": 0x20, "command": 0x10})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content[:4], b"RIFF")
        self.assertEqual(response.content, NECEncoder().encode(0x20DF10EF))

    def test_encode_options(self):
        response = self.client.post("/api/encode/hex", json={
            "hex_code": "0x20DF10EF",
            "modulation": "square",
            "carrier_khz": 36,
            "repeat_count": 2,
        })

        self.assertEqual(response.status_code, 200)
        channels = struct.unpack('<H', response.content[22:24])[0]
        self.assertEqual(channels, 1)
        config = GeneratorConfig(modulation="square", repeat_count=2).with_carrier_khz(36)
        self.assertEqual(response.content, NECEncoder(config).encode(0x20DF10EF))

    def test_compensated_is_longer(self):
        plain = self.client.post("/api/encode/hex", json={"hex_code": "0x20DF10EF"})
        stretched = self.client.post("/api/encode/hex", json={"hex_code": "0x20DF10EF", "compensate_timing": True})

        self.assertEqual(stretched.status_code, 200)
        self.assertGreater(len(stretched.content), len(plain.content))

    def test_bad_hex_is_400(self):
        response = self.client.post("/api/encode/hex", json={"hex_code": "0xZZDF10EF"})

        self.assertEqual(response.status_code, 400)
        self.assertIn("non-hex", response.json()["detail"])

    def test_short_hex_is_422(self):
        response = self.client.post("/api/encode/hex", json={"hex_code": "1234"})
        self.assertEqual(response.status_code, 422)

    def test_out_of_range_is_422(self):
        for payload in ({"address": 256, "command": 0},
                        {"address": 0, "command": -1},
                        {"address": 0, "command": 0, "repeat_count": 0},
                        {"address": 0, "command": 0, "modulation": "fm"}):
            with self.subTest(payload=payload):
                response = self.client.post("/api/encode", json=payload)
                self.assertEqual(response.status_code, 422)

    def test_config_error_is_400(self):
        # 90kHz leaves no "on" sample per carrier period at 33% duty
        response = self.client.post("/api/encode", json={"address": 0, "command": 0, "carrier_khz": 90, "modulation": "square"})
        self.assertEqual(response.status_code, 400)

    def test_preview(self):
        response = self.client.post("/api/encode/preview", json={"hex_code": "0x20DF10EF", "name": "power"})
        info = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(info["command_name"], "power")
        self.assertEqual(info["address_hex"], "0x20")
        self.assertEqual(info["command_hex"], "0x10")
        self.assertEqual(info["binary_command_inv"], "11101111")
        self.assertEqual(info["sections"][0]["label"], "AGC")


if __name__ == '__main__':
    unittest.main()
