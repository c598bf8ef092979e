from nodegrad.main import main


def test_main_reports_and_releases_the_transient_graph(capsys):
    main()
    out = capsys.readouterr().out
    assert "g = 15.0" in out
    assert "d(g)/d(c) = 4.0" in out
    assert "number of parameters: 337" in out
    assert "graph size after release: 337 nodes" in out
