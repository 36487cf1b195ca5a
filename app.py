import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from typing import Dict, Tuple

from src import config
from src.data.load_data import load_datasets
from src.encoding import legend_entries
from src.explorer import ExplorerView, HotspotExplorer
from src.presentation import heat_points, lane_paths, records_to_frame
from src.records import LaneNetwork, RecordStore
from src.utils.attribute_taxonomy import Field
from src.utils.exceptions import LoadFailure
from stats.aggregation import report_frame

MAP_CENTER = {"lat": config.DEFAULT_LAT, "lon": config.DEFAULT_LON}

ATTRIBUTE_LABELS: Dict[Field, str] = {
    Field.SEVERITY: 'Accident Type',
    Field.WEATHER: 'Weather',
    Field.LIGHTING: 'Lighting',
    Field.BIKE_LANE: 'Bike Lane',
}

PLOTLY_CONFIG = {
    'scrollZoom': True,
    'displaylogo': False,
    'modeBarButtonsToRemove': ['lasso2d', 'select2d']
}


@st.cache_resource(show_spinner='Loading accidents and bike lanes...')
def load_shared_datasets(accidents_path: str, lanes_path: str) -> Tuple[RecordStore, LaneNetwork]:
    return load_datasets(accidents_path, lanes_path)


def get_explorer() -> HotspotExplorer:
    explorer = st.session_state.get('explorer')
    if explorer is None:
        explorer = HotspotExplorer()
        st.session_state['explorer'] = explorer
    if not explorer.is_loaded:
        try:
            store, lanes = load_shared_datasets(str(config.ACCIDENTS_PATH), str(config.LANES_PATH))
        except LoadFailure as err:
            st.error(f'Error loading the {err.dataset} data file. {err.reason}')
            st.stop()
        explorer.attach(store, lanes)
    return explorer


def sync_filter(explorer: HotspotExplorer, field: Field, selected) -> None:
    """Apply the difference between a multiselect and the filter state, one toggle per label."""
    current = explorer.filter_state[field].allowed or frozenset()
    for label in set(selected) ^ set(current):
        explorer.toggle_value(field, label)


def build_map(view: ExplorerView, lanes: LaneNetwork) -> go.Figure:
    fig = go.Figure()

    lane_lons, lane_lats = lane_paths(lanes)
    if lane_lons:
        fig.add_trace(go.Scattermap(
            lon=lane_lons, lat=lane_lats, mode='lines',
            line={'color': config.LANE_COLOR, 'width': 2},
            name='Bike lanes', hoverinfo='skip',
        ))

    features = records_to_frame(view.features, view.colors)
    if not features.empty:
        heat = pd.DataFrame(heat_points(view.features), columns=['lat', 'lon', 'weight'])
        fig.add_trace(go.Densitymap(
            lat=heat['lat'], lon=heat['lon'], z=heat['weight'],
            radius=25, opacity=0.5, showscale=False, name='Density', hoverinfo='skip',
        ))
        fig.add_trace(go.Scattermap(
            lon=features['lon'], lat=features['lat'], mode='markers',
            marker={'size': 8, 'color': features['color'], 'opacity': 0.9},
            customdata=features[['popup']].to_numpy(),
            hovertemplate='%{customdata[0]}<extra></extra>',
            name='Accidents',
        ))

    if view.peak is not None:
        lon, lat = view.peak.position
        fig.add_trace(go.Scattermap(
            lon=[lon], lat=[lat], mode='markers+text',
            marker={'size': 22, 'color': 'black', 'symbol': 'star'},
            text=[f'Hotspot ({view.peak.count} accidents)'], textposition='top right',
            name='Hotspot',
        ))

    fig.update_layout(
        map={'style': 'carto-positron', 'center': MAP_CENTER, 'zoom': config.DEFAULT_ZOOM},
        margin={'r': 0, 't': 0, 'l': 0, 'b': 0},
        height=650,
        legend={'yanchor': 'bottom', 'y': 0.01, 'xanchor': 'left', 'x': 0.01},
    )
    return fig


def main():
    st.set_page_config(page_title='Montreal Bike Accident Hotspots', layout='wide')
    st.markdown('## Montreal Bike Accident Hotspots')
    st.caption('Filter bike accidents, colour them by one attribute and find the densest cluster.')

    explorer = get_explorer()

    st.sidebar.header('Select variable')
    attributes = list(ATTRIBUTE_LABELS)
    attribute = st.sidebar.radio(
        'Colour points by',
        attributes,
        index=attributes.index(explorer.selected_attribute),
        format_func=ATTRIBUTE_LABELS.get,
    )
    if attribute != explorer.selected_attribute:
        explorer.set_selected_attribute(attribute)

    st.sidebar.markdown('---')
    st.sidebar.subheader('Filters')
    for field in Field:
        options = explorer.available_values(field)
        current = sorted(explorer.filter_state[field].allowed or ())
        selected = st.sidebar.multiselect(ATTRIBUTE_LABELS[field], options, default=[c for c in current if c in options], key=f'filter-{field.value}')
        sync_filter(explorer, field, selected)

    if st.sidebar.button('Reset filters', key='reset-filters'):
        explorer.reset_filters()
        for field in Field:
            st.session_state.pop(f'filter-{field.value}', None)
        st.rerun()

    view = explorer.view
    total = len(explorer.store)

    kpis = st.columns(3)
    kpis[0].metric('Visible accidents', f'{len(view.features):,}', help=f'{total:,} accidents loaded')
    if view.peak is not None:
        kpis[1].metric('Hotspot neighbours', view.peak.count, help=f'Accidents within {explorer.radius_km:g} km of the hotspot')
        kpis[2].metric('Hotspot location', f'{view.peak.position[1]:.5f}, {view.peak.position[0]:.5f}')

    st.plotly_chart(build_map(view, explorer.lane_network), width='stretch', config=PLOTLY_CONFIG)

    legend = legend_entries((label for label, _ in view.report), view.attribute)
    if legend:
        st.markdown(' '.join(
            f'<span style="background:{color};width:12px;height:12px;display:inline-block;margin:0 4px 0 12px;"></span>{label}'
            for label, color in legend
        ) + f'<span style="background:{config.LANE_COLOR};width:20px;height:4px;display:inline-block;margin:0 5px 0 12px;"></span>Bike lanes',
            unsafe_allow_html=True)

    st.subheader(f'Breakdown by {ATTRIBUTE_LABELS[view.attribute].lower()}')
    if view.is_empty:
        st.info('No matching records for the current filters.')
        return

    table = report_frame(view.features, view.attribute)
    cols = st.columns([1, 2])
    with cols[0]:
        st.dataframe(
            table.rename(columns={'label': ATTRIBUTE_LABELS[view.attribute], 'count': 'Accidents', 'percentage': 'Share (%)'}),
            hide_index=True,
        )
    with cols[1]:
        bar = px.bar(
            table,
            x='percentage',
            y='label',
            orientation='h',
            color='label',
            color_discrete_map=dict(legend),
            title=f'Share of visible accidents by {ATTRIBUTE_LABELS[view.attribute].lower()}',
        )
        bar.update_layout(template='plotly_white', xaxis_title='Share (%)', yaxis_title='', showlegend=False)
        st.plotly_chart(bar, width='stretch', config=PLOTLY_CONFIG)


if __name__ == '__main__':
    main()
