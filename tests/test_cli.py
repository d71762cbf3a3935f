"""
Tests for the command-line interface.
"""
import json

from click.testing import CliRunner

from bloom_engine import __version__
from bloom_engine.cli import main
from bloom_engine.config import FilterConfig


def test_version():
    """Test the version command."""
    result = CliRunner().invoke(main, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_size():
    """Test recommended sizing output."""
    result = CliRunner().invoke(main, ["size", "-n", "1000", "-p", "0.01"])

    assert result.exit_code == 0
    assert "9586" in result.output
    assert "1199" in result.output


def test_size_invalid():
    """Test sizing with an invalid load fails cleanly."""
    result = CliRunner().invoke(main, ["size", "-n", "0"])

    assert result.exit_code != 0
    assert "expected_n must be positive" in result.output


def test_check(tmp_path):
    """Test querying values against a file of members."""
    source = tmp_path / "fruits.txt"
    source.write_text("apple\nbanana\n\ncherry\n")

    result = CliRunner().invoke(main, ["check", str(source), "apple", "durian"])

    assert result.exit_code == 0
    assert "possibly present" in result.output
    assert "definitely absent" in result.output


def test_check_with_config(tmp_path):
    """Test check honours a configuration file."""
    config_path = tmp_path / "filter.json"
    FilterConfig(capacity_bits=2048, hash_count=3, hash_algorithm="xxhash").to_file(str(config_path))
    source = tmp_path / "words.txt"
    source.write_text("alpha\nbeta\n")

    result = CliRunner().invoke(main, ["check", str(source), "beta", "-c", str(config_path)])

    assert result.exit_code == 0
    assert "Loaded configuration" in result.output
    assert "bits=2048" in result.output


def test_check_invalid_bits(tmp_path):
    """Test check rejects an invalid capacity."""
    source = tmp_path / "words.txt"
    source.write_text("alpha\n")

    result = CliRunner().invoke(main, ["check", str(source), "alpha", "-m", "0"])

    assert result.exit_code != 0


def test_simulate():
    """Test the false positive simulation."""
    result = CliRunner().invoke(main, ["simulate", "-n", "500", "-q", "2000"])

    assert result.exit_code == 0
    assert "False negatives" in result.output
    assert "Observed rate" in result.output


def test_simulate_threaded():
    """Test the simulation with concurrent inserts."""
    result = CliRunner().invoke(main, ["simulate", "-n", "2000", "-q", "1000", "-t", "4", "-a", "xxhash"])

    assert result.exit_code == 0


def test_generate_config(tmp_path):
    """Test writing a configuration file."""
    output = tmp_path / "generated.json"

    result = CliRunner().invoke(
        main, ["generate-config", str(output), "-n", "5000", "-p", "0.005", "--concurrent"]
    )

    assert result.exit_code == 0
    data = json.loads(output.read_text())
    assert data["expected_elements"] == 5000
    assert data["concurrent"] is True
    assert FilterConfig.from_file(str(output)).validate()


def test_generate_config_invalid(tmp_path):
    """Test generate-config rejects invalid values."""
    output = tmp_path / "bad.json"

    result = CliRunner().invoke(main, ["generate-config", str(output), "-p", "2"])

    assert result.exit_code != 0
    assert not output.exists()


def test_invalid_log_level():
    """Test an unknown log level is reported."""
    result = CliRunner().invoke(main, ["--log-level", "CHATTY", "version"])

    assert result.exit_code != 0


def test_simulate_prometheus():
    """Test the simulation prints Prometheus metrics on request."""
    result = CliRunner().invoke(main, ["simulate", "-n", "200", "-q", "500", "--prometheus"])

    assert result.exit_code == 0
    assert "bloom_filter_inserts_total 200" in result.output
    assert "bloom_filter_queries_total 700" in result.output


def test_check_malformed_config(tmp_path):
    """Test a malformed configuration file is reported without a traceback."""
    config_path = tmp_path / "broken.json"
    config_path.write_text("not json")
    source = tmp_path / "words.txt"
    source.write_text("alpha\n")

    result = CliRunner().invoke(main, ["check", str(source), "alpha", "-c", str(config_path)])

    assert result.exit_code == 1
    assert "malformed configuration" in result.output
    assert not isinstance(result.exception, ValueError)


def test_check_config_with_bad_algorithm_type(tmp_path):
    """Test a non-string hash algorithm in the file is reported cleanly."""
    config_path = tmp_path / "filter.json"
    config_path.write_text(json.dumps({"hash_algorithm": 5}))
    source = tmp_path / "words.txt"
    source.write_text("alpha\n")

    result = CliRunner().invoke(main, ["check", str(source), "alpha", "-c", str(config_path)])

    assert result.exit_code == 1
    assert "hash_algorithm" in result.output


def test_check_uses_config_logging(tmp_path):
    """Test check applies the log level and file from the configuration."""
    log_file = tmp_path / "check.log"
    config_path = tmp_path / "filter.json"
    FilterConfig(capacity_bits=512, log_level="DEBUG", log_file=str(log_file)).to_file(str(config_path))
    source = tmp_path / "words.txt"
    source.write_text("alpha\n")

    result = CliRunner().invoke(main, ["check", str(source), "alpha", "-c", str(config_path)])

    assert result.exit_code == 0
    assert "bloom_insert" in log_file.read_text()


def test_check_command_line_log_level_wins(tmp_path):
    """Test --log-level overrides the level from the configuration file."""
    log_file = tmp_path / "check.log"
    config_path = tmp_path / "filter.json"
    FilterConfig(capacity_bits=512, log_level="DEBUG", log_file=str(log_file)).to_file(str(config_path))
    source = tmp_path / "words.txt"
    source.write_text("alpha\n")

    result = CliRunner().invoke(
        main, ["--log-level", "WARNING", "check", str(source), "alpha", "-c", str(config_path)]
    )

    assert result.exit_code == 0
    assert "bloom_insert" not in log_file.read_text()
