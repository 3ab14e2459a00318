from datetime import datetime

import yaml
from click.testing import CliRunner

from recurring_tracker.cli import main as cli
from recurring_tracker.stores.sqlite import SQLiteStore


def write_config(tmp_path, **extra):
    cfg = {
        'db_path': str(tmp_path / 'recur.db'),
        'output_dir': str(tmp_path / 'data'),
    }
    cfg.update(extra)
    config_path = tmp_path / 'config.yaml'
    with open(config_path, 'w') as f:
        yaml.safe_dump(cfg, f)
    return config_path


def write_templates(tmp_path):
    path = tmp_path / 'recurring.yaml'
    path.write_text(
        """\
- id: rent
  description: Rent
  category: housing
  account: checking
  amount: 600
  type: expense
  frequency: monthly
  start_date: 2024-05-29
  include_start: true
- id: gym
  description: Gym
  category: health
  account: visa
  amount: 40
  frequency: weekly
  start_date: 2024-05-27
  max_occurrences: 1
"""
    )
    return path


def invoke(config_path, *args):
    runner = CliRunner()
    return runner.invoke(cli, ['--config', str(config_path), *args])


def test_add_then_list(tmp_path):
    config_path = write_config(tmp_path)
    res = invoke(
        config_path, '--now', '2024-05-01',
        'add', '--amount', '600', '--frequency', 'monthly',
        '--category', 'housing', '--account', 'checking',
        '--description', 'Rent', '--start-date', '2024-01-31',
    )
    assert res.exit_code == 0, res.output
    assert 'next due 2024-02-29' in res.output

    store = SQLiteStore({'db_path': str(tmp_path / 'recur.db')})
    [template] = store.list_templates()
    assert template.original_target_day == 31
    assert template.created_at == datetime(2024, 5, 1)

    res = invoke(config_path, 'list')
    assert res.exit_code == 0, res.output
    assert template.id in res.output
    assert 'Monthly' in res.output
    assert 'active' in res.output


def test_import_run_and_upcoming(tmp_path):
    config_path = write_config(tmp_path)
    templates = write_templates(tmp_path)

    res = invoke(config_path, '--now', '2024-05-20', 'import', str(templates))
    assert res.exit_code == 0, res.output
    assert 'Imported 2 template(s).' in res.output

    res = invoke(config_path, '--now', '2024-05-20', 'import', str(templates))
    assert 'Imported 0 template(s).' in res.output

    res = invoke(config_path, '--now', '2024-05-28', 'upcoming', '--days', '3')
    assert res.exit_code == 0, res.output
    assert '2024-05-29' in res.output
    assert 'Gym' not in res.output

    res = invoke(config_path, '--now', '2024-05-29T10:00:00', 'run')
    assert res.exit_code == 0, res.output
    assert 'Generated 1 transaction(s).' in res.output

    res = invoke(config_path, '--now', '2024-05-29T18:00:00', 'run')
    assert 'Generated 0 transaction(s).' in res.output

    store = SQLiteStore({'db_path': str(tmp_path / 'recur.db')})
    assert store.get_template('rent').next_execution_date == datetime(2024, 6, 29)
    [tx] = store.list_transactions()
    assert tx.id.startswith('rent_')
    assert tx.date == datetime(2024, 5, 29)


def test_run_enforces_max_occurrences(tmp_path):
    config_path = write_config(tmp_path, enforce_max_occurrences=True)
    invoke(config_path, '--now', '2024-05-20', 'import', str(write_templates(tmp_path)))

    res = invoke(config_path, '--now', '2024-06-03', 'run')
    assert 'Gym' in res.output
    res = invoke(config_path, '--now', '2024-06-10', 'run')
    assert 'Gym' not in res.output

    store = SQLiteStore({'db_path': str(tmp_path / 'recur.db')})
    assert store.get_template('gym').is_active is False


def test_preview_csv(tmp_path):
    config_path = write_config(tmp_path)
    invoke(config_path, '--now', '2024-05-20', 'import', str(write_templates(tmp_path)))

    res = invoke(
        config_path, '--now', '2024-05-29',
        'preview', '--months', '2', '--template-id', 'rent', '--output', 'csv',
    )
    assert res.exit_code == 0, res.output
    out_csv = tmp_path / 'data' / 'recurring_preview.csv'
    lines = out_csv.read_text().splitlines()
    assert lines[0] == 'id,date,description,category,account,type,amount,frequency'
    assert [line.split(',')[1] for line in lines[1:]] == [
        '2024-05-29T00:00:00',
        '2024-06-29T00:00:00',
        '2024-07-29T00:00:00',
    ]
    assert lines[1].endswith('Rent,housing,checking,expense,600.00,monthly')

    # preview must not move the template
    store = SQLiteStore({'db_path': str(tmp_path / 'recur.db')})
    assert store.get_template('rent').next_execution_date == datetime(2024, 5, 29)


def test_preview_console_month_filter(tmp_path):
    config_path = write_config(tmp_path, locale='zh-TW')
    invoke(config_path, '--now', '2024-05-20', 'import', str(write_templates(tmp_path)))

    res = invoke(config_path, '--now', '2024-05-29', 'preview', '--month', '2024-07')
    assert res.exit_code == 0, res.output
    assert '2024-07-29' in res.output
    assert '2024-06-29' not in res.output
    assert '每月' in res.output
    assert '每週' in res.output

    res = invoke(config_path, 'preview', '--month', 'July')
    assert res.exit_code == 2
    assert 'YYYY-MM' in res.output


def test_pause_resume_delete(tmp_path):
    config_path = write_config(tmp_path)
    invoke(config_path, '--now', '2024-05-20', 'import', str(write_templates(tmp_path)))

    res = invoke(config_path, 'pause', 'rent')
    assert res.exit_code == 0, res.output
    res = invoke(config_path, '--now', '2024-05-29', 'run')
    assert 'Rent' not in res.output

    res = invoke(config_path, 'resume', 'rent')
    assert res.exit_code == 0, res.output
    res = invoke(config_path, '--now', '2024-05-29', 'run')
    assert 'Rent' in res.output

    res = invoke(config_path, 'delete', 'rent')
    assert res.exit_code == 0, res.output
    res = invoke(config_path, 'list')
    assert 'rent' not in res.output.split()

    res = invoke(config_path, 'pause', 'rent')
    assert res.exit_code == 1
    assert 'Unknown template: rent' in res.output


def test_import_reports_bad_file(tmp_path):
    config_path = write_config(tmp_path)
    bad = tmp_path / 'bad.yaml'
    bad.write_text('- {amount: 1, start_date: 2024-01-01}\n')
    res = invoke(config_path, 'import', str(bad))
    assert res.exit_code == 1
    assert "Missing 'frequency'" in res.output


def test_preview_and_upcoming_with_offset_dates(tmp_path):
    config_path = write_config(tmp_path)
    templates = tmp_path / 'aware.yaml'
    templates.write_text(
        """\
- id: rent
  description: Rent
  category: housing
  account: checking
  amount: 600
  frequency: monthly
  start_date: "2024-05-29T09:00:00+08:00"
  include_start: true
"""
    )
    res = invoke(config_path, '--now', '2024-05-20', 'import', str(templates))
    assert res.exit_code == 0, res.output

    res = invoke(config_path, '--now', '2024-05-20', 'preview', '--months', '1')
    assert res.exit_code == 0, res.output
    assert '2024-05-29' in res.output
    assert '2024-06-29' not in res.output

    res = invoke(config_path, '--now', '2024-05-28', 'upcoming')
    assert res.exit_code == 0, res.output
    assert '2024-05-29' in res.output
    assert 'rent' in res.output
