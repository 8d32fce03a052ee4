import pytest
import yaml

from pls.config import PlsConfig, SearchConfig, load_config, save_config_template, validate_config


def test_load_config(tmp_path):
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text(
        """
        database:
          path: videos.sqlite
          max_retries: 5
        search:
          strategy: similarity
          field: title
          fuzzy_matching:
            min_similarity: 0.8
        output:
          format: "{Index}. {ChannelTitle} - {Title}"
        logging:
          level: DEBUG
        """
    )
    cfg = load_config(str(cfg_path))
    assert cfg.database.path == "videos.sqlite"
    assert cfg.database.max_retries == 5
    assert cfg.search.strategy == "similarity"
    assert cfg.search.field == "title"
    assert cfg.search.fuzzy_matching.min_similarity == 0.8
    assert cfg.output.format == "{Index}. {ChannelTitle} - {Title}"
    assert cfg.output.page_size == 10
    assert cfg.logging.level == "DEBUG"


def test_defaults_without_file():
    cfg = load_config(None)
    assert cfg == PlsConfig()
    assert cfg.search.strategy == "fold"
    assert cfg.output.format == "{Index}: {Title}"


def test_save_config_template(tmp_path):
    output = tmp_path / "template.yaml"
    save_config_template(str(output))
    assert output.exists()
    data = yaml.safe_load(output.read_text())
    assert "database" in data and "logging" in data
    assert data["search"]["fuzzy_matching"]["min_similarity"] == 0.7

    assert load_config(str(output)) == PlsConfig()


def test_load_config_ignores_extra_keys(tmp_path):
    cfg_path = tmp_path / "extra.yaml"
    cfg_path.write_text(
        """
        database:
          path: sample.sqlite
          unknown: 123
        plugins: [a, b]
        """
    )
    cfg = load_config(str(cfg_path))
    assert cfg.database.path == "sample.sqlite"


def test_empty_config_file(tmp_path):
    cfg_path = tmp_path / "empty.yaml"
    cfg_path.write_text("")
    assert load_config(str(cfg_path)) == PlsConfig()


@pytest.mark.parametrize(
    "content",
    [
        "search: [unclosed",
        "- just\n- a list\n",
        "search:\n  strategy: regex\n",
        "search:\n  field: tags\n",
        "output:\n  page_size: 0\n",
        "logging:\n  level: LOUD\n",
        "database:\n  connection_pool_size: 50\n",
        "ingest:\n  max_retries: 0\n",
    ],
)
def test_invalid_config(tmp_path, content):
    cfg_path = tmp_path / "bad.yaml"
    cfg_path.write_text(content)
    with pytest.raises(ValueError):
        load_config(str(cfg_path))


def test_fzf_strategy_is_valid():
    cfg = PlsConfig()
    cfg.search.strategy = "fzf"
    validate_config(cfg)


def test_search_defaults():
    search = SearchConfig()
    assert search.field == "all"
    assert search.fzf_args == ["--style=minimal", "--multi", "--cycle"]
    assert search.fuzzy_matching.min_similarity == 0.7
    # each instance gets its own list
    search.fzf_args.append("--exact")
    assert SearchConfig().fzf_args == ["--style=minimal", "--multi", "--cycle"]


@pytest.mark.parametrize(
    "content",
    [
        "output:\n  page_size: ten\n",
        "logging:\n  level: 10\n",
        "search:\n  fuzzy_matching:\n    min_similarity: high\n",
    ],
)
def test_wrongly_typed_values(tmp_path, content):
    cfg_path = tmp_path / "typed.yaml"
    cfg_path.write_text(content)
    with pytest.raises(ValueError):
        load_config(str(cfg_path))
