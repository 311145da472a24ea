"""
tests/test_paths.py - Artifact locations
"""

from nonmarginal_vsl import paths as paths_module
from nonmarginal_vsl.paths import FIGURES_DIR, OUTPUT_DIR, CommonPaths, ensure_directories_exist


class TestCommonPaths:

    def test_defaults_to_project_layout(self):
        paths = CommonPaths()
        assert paths.output_dir == OUTPUT_DIR
        assert paths.figures_dir == FIGURES_DIR

    def test_artifacts_follow_configured_directories(self, tmp_path):
        paths = CommonPaths(tmp_path / "out", tmp_path / "fig")
        for path in [paths.results_table, paths.summary_table,
                     paths.valuation_grid, paths.historical_gains]:
            assert path.parent == tmp_path / "out"
        for path in [paths.value_plot, paths.relative_marginal_value_plot, paths.marginal_vsl_plot]:
            assert path.parent == tmp_path / "fig"
            assert path.suffix == ".pdf"

    def test_no_default_instance_created_on_import(self):
        # Runners build their own CommonPaths from the directories they are given
        assert not any(isinstance(value, CommonPaths) for value in vars(paths_module).values())

    def test_ensure_directories_exist(self, tmp_path):
        ensure_directories_exist(tmp_path / "a" / "out", tmp_path / "a" / "fig")
        assert (tmp_path / "a" / "out").is_dir()
        assert (tmp_path / "a" / "fig").is_dir()
