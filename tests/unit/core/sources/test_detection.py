#!/usr/bin/env python3
"""
Tests for repository detection helpers.
"""

import json
import unittest

from core.sources.detection import (
    detect_live_url,
    frameworks_from_package_json,
    frameworks_from_requirements,
    has_deployment_config,
    has_test_files,
)


class TestFrameworkDetection(unittest.TestCase):
    def test_package_json(self):
        content = json.dumps({
            "dependencies": {"react": "^18.0.0", "react-dom": "^18.0.0", "express": "4"},
            "devDependencies": {"jest": "29"},
        })
        self.assertEqual(frameworks_from_package_json(content), ["React", "Express.js", "Jest"])

    def test_malformed_package_json(self):
        self.assertEqual(frameworks_from_package_json("{not json"), [])
        self.assertEqual(frameworks_from_package_json("[]"), [])
        self.assertEqual(frameworks_from_package_json(None), [])

    def test_requirements(self):
        content = "Django>=4.2\nscikit-learn==1.3\n# comment\nrequests[socks]\n\nuvloop\n"
        self.assertEqual(frameworks_from_requirements(content), ["Django", "Scikit-learn", "Requests"])


class TestTreeDetection(unittest.TestCase):
    def test_test_files(self):
        self.assertTrue(has_test_files(["src/app.py", "tests/test_app.py"]))
        self.assertTrue(has_test_files(["src/Button.test.tsx"]))
        self.assertTrue(has_test_files(["pkg/test_utils.py"]))
        self.assertFalse(has_test_files(["src/app.py", "README.md"]))

    def test_deployment_config(self):
        self.assertTrue(has_deployment_config(["Dockerfile"]))
        self.assertTrue(has_deployment_config(["k8s/deployment.yaml"]))
        self.assertFalse(has_deployment_config(["docs/Dockerfile.md", "src/k8s.py"]))


class TestLiveUrl(unittest.TestCase):
    def test_hosted_url(self):
        readme = "Check it out at https://my-app.vercel.app/ today"
        self.assertEqual(detect_live_url(readme), "https://my-app.vercel.app/")

    def test_demo_link(self):
        readme = "[Live Demo](https://example.com/app)"
        self.assertEqual(detect_live_url(readme), "https://example.com/app")

    def test_no_url(self):
        self.assertIsNone(detect_live_url("Just a library"))
        self.assertIsNone(detect_live_url(None))


if __name__ == '__main__':
    unittest.main()
