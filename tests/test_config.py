import os
import tempfile
import unittest

from depviz.config import Config, ConfigError, load_config

HEADER = "visualizerPath,packageName,outputFilePath,maxDepth,repositoryUrl\n"


class TestLoadConfig(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, name, content):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_reads_csv(self):
        path = self.write("config.csv", HEADER + "dot,example-package,output.dot,2,https://api.example.com\n")

        config = load_config(path)

        self.assertEqual(config, Config(
            visualizer_path="dot",
            package_name="example-package",
            output_file_path="output.dot",
            max_depth=2,
            repository_url="https://api.example.com",
        ))
        self.assertEqual(config.raster_command, "magick")
        self.assertFalse(config.skip_cycles)

    def test_visualizer_defaults_to_dot(self):
        path = self.write("config.csv", HEADER + ",express,express.dot,1,https://registry.npmjs.org\n")

        self.assertEqual(load_config(path).visualizer_path, "dot")

    def test_last_row_wins(self):
        path = self.write(
            "config.csv",
            HEADER
            + "dot,first,first.dot,1,https://a.example.com\n"
            + "/usr/bin/dot,second,second.dot,3,https://b.example.com\n",
        )

        config = load_config(path)

        self.assertEqual(config.package_name, "second")
        self.assertEqual(config.visualizer_path, "/usr/bin/dot")
        self.assertEqual(config.max_depth, 3)

    def test_optional_columns(self):
        path = self.write(
            "config.csv",
            "packageName,outputFilePath,maxDepth,repositoryUrl,rasterCommand,requestTimeout,skipCycles\n"
            "react,react.dot,4,https://registry.npmjs.org,convert,10,yes\n",
        )

        config = load_config(path)

        self.assertEqual(config.raster_command, "convert")
        self.assertEqual(config.request_timeout, 10.0)
        self.assertTrue(config.skip_cycles)

    def test_reads_toml(self):
        path = self.write(
            "depviz.toml",
            '[depviz]\n'
            'packageName = "express"\n'
            'outputFilePath = "out/express.dot"\n'
            'maxDepth = 3\n'
            'repositoryUrl = "https://registry.npmjs.org"\n'
            'skipCycles = true\n',
        )

        config = load_config(path)

        self.assertEqual(config.package_name, "express")
        self.assertEqual(config.max_depth, 3)
        self.assertEqual(config.visualizer_path, "dot")
        self.assertTrue(config.skip_cycles)
        self.assertEqual(config.output_base_name, "out/express")

    def test_output_base_name(self):
        config = Config("p", "graph.dot", 1, "https://x")
        self.assertEqual(config.output_base_name, "graph")

        config = Config("p", "graph", 1, "https://x")
        self.assertEqual(config.output_base_name, "graph")

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_config(os.path.join(self.tmp.name, "nope.csv"))

    def test_header_only(self):
        path = self.write("config.csv", HEADER)

        with self.assertRaisesRegex(ConfigError, "No configuration row"):
            load_config(path)

    def test_missing_required_field(self):
        path = self.write("config.csv", HEADER + "dot,,output.dot,2,https://api.example.com\n")

        with self.assertRaisesRegex(ConfigError, "packageName"):
            load_config(path)

    def test_bad_depth(self):
        for depth in ("two", "0", "-1"):
            path = self.write("config.csv", HEADER + f"dot,pkg,output.dot,{depth},https://api.example.com\n")
            with self.assertRaises(ConfigError):
                load_config(path)

    def test_bad_skip_cycles(self):
        path = self.write(
            "config.csv",
            "packageName,outputFilePath,maxDepth,repositoryUrl,skipCycles\n"
            "pkg,out.dot,2,https://api.example.com,maybe\n",
        )

        with self.assertRaisesRegex(ConfigError, "skipCycles"):
            load_config(path)

    def test_invalid_toml(self):
        path = self.write("bad.toml", "packageName = \n")

        with self.assertRaises(ConfigError):
            load_config(path)

    def test_csv_with_byte_order_mark(self):
        path = os.path.join(self.tmp.name, "config.csv")
        with open(path, "w", encoding="utf-8-sig") as f:
            f.write(HEADER + "/opt/graphviz/bin/dot,express,express.dot,2,https://registry.npmjs.org\n")

        config = load_config(path)

        self.assertEqual(config.visualizer_path, "/opt/graphviz/bin/dot")
        self.assertEqual(config.package_name, "express")

    def test_toml_depth_must_be_integer(self):
        for depth in ("2.7", "true", "[2]"):
            path = self.write(
                "depviz.toml",
                'packageName = "express"\n'
                'outputFilePath = "express.dot"\n'
                f'maxDepth = {depth}\n'
                'repositoryUrl = "https://registry.npmjs.org"\n',
            )
            with self.assertRaises(ConfigError):
                load_config(path)

    def test_toml_string_depth_is_accepted(self):
        path = self.write(
            "depviz.toml",
            'packageName = "express"\n'
            'outputFilePath = "express.dot"\n'
            'maxDepth = "3"\n'
            'repositoryUrl = "https://registry.npmjs.org"\n',
        )

        self.assertEqual(load_config(path).max_depth, 3)
